"""
Asha Journey - Bitcoin Realms Learning Experience

Streamlit application that navigates the seven realms, resolves missions
and records the learner's progress locally.

Usage:
    streamlit run app.py
"""

import asyncio
import logging

import streamlit as st

from ashajourney.classroom import (
    MissionAvailability,
    MissionResolver,
    ProgressPolicy,
    ProgressStore,
    RealmState,
    ResolutionSession,
    SnapshotStorage,
    load_catalog,
    MAP_PATH,
    mission_path,
    realm_path,
    parse_mission_path,
)
from ashajourney.config import load_settings
from ashajourney.viewer import get_not_found_css, notice_for_result, render_not_found_html


# -----------------------------------------------------------------------------
# Configuration
# -----------------------------------------------------------------------------

settings = load_settings()

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

st.set_page_config(
    page_title="Asha Journey",
    page_icon="₿",
    layout="wide",
    initial_sidebar_state="expanded",
)

STATE_ICONS = {
    RealmState.LOCKED: "🔒",
    RealmState.UNLOCKED: "○",
    RealmState.IN_PROGRESS: "→",
    RealmState.COMPLETED: "✓",
}


# -----------------------------------------------------------------------------
# Session State Initialization
# -----------------------------------------------------------------------------

def init_session_state():
    """Initialize session state variables."""
    if "catalog" not in st.session_state:
        st.session_state.catalog = load_catalog(settings.catalog_path)

    if "store" not in st.session_state:
        store = ProgressStore(
            SnapshotStorage(settings.progress_db),
            bypass_mode=settings.bypass_mode,
        )
        store.load()
        st.session_state.store = store

    if "policy" not in st.session_state:
        st.session_state.policy = ProgressPolicy(
            st.session_state.store,
            st.session_state.catalog,
            lock_policy=settings.lock_policy,
        )

    if "session" not in st.session_state:
        st.session_state.session = ResolutionSession(MissionResolver(st.session_state.catalog))

    if "location" not in st.session_state:
        st.session_state.location = st.query_params.get("path", MAP_PATH)


def navigate(path: str):
    st.session_state.location = path
    st.query_params["path"] = path
    st.rerun()


# -----------------------------------------------------------------------------
# Sidebar: Realms and Backpack
# -----------------------------------------------------------------------------

def render_sidebar():
    """Render the sidebar with realm tree, progress and backpack."""
    st.sidebar.title("₿ Asha Journey")
    store = st.session_state.store
    policy = st.session_state.policy

    if not store.is_authenticated:
        name = st.sidebar.text_input("Choose a learner name")
        if st.sidebar.button("Start journey", disabled=not name):
            store.register(name)
            st.rerun()
    else:
        st.sidebar.markdown(f"**Learner:** {store.snapshot.username}")

    stats = policy.progress_summary()
    st.sidebar.markdown(
        f"**Progress:** {stats['completed']}/{stats['total_missions']} missions "
        f"({stats['completion_percent']}%)"
    )
    st.sidebar.progress(stats['completion_percent'] / 100)

    st.sidebar.divider()
    st.sidebar.subheader("Realms")
    for nav_realm in policy.navigation_tree():
        realm = nav_realm.realm
        label = f"{STATE_ICONS[nav_realm.state]} {realm.name} ({nav_realm.completed_count}/{nav_realm.total_count})"
        if st.sidebar.button(label, key=f"realm_{realm.id}", disabled=nav_realm.state == RealmState.LOCKED,
                             use_container_width=True):
            store.set_current_realm(realm.id)
            navigate(realm_path(realm.id))

    render_backpack()


def render_backpack():
    store = st.session_state.store
    items = store.backpack
    st.sidebar.divider()
    st.sidebar.subheader(f"Backpack ({len(items)})")
    for item in items:
        with st.sidebar.expander(item.text[:30] + "..." if len(item.text) > 30 else item.text):
            notes = st.text_area("Notes", value=item.notes or "", key=f"notes_{item.id}")
            col1, col2 = st.columns(2)
            with col1:
                if st.button("Save", key=f"save_{item.id}"):
                    store.update_backpack_item(item.id, {"notes": notes})
                    st.rerun()
            with col2:
                if st.button("Remove", key=f"remove_{item.id}"):
                    store.remove_from_backpack(item.id)
                    st.rerun()


# -----------------------------------------------------------------------------
# Main Content
# -----------------------------------------------------------------------------

def render_map_view():
    st.title("The Realms")
    policy = st.session_state.policy
    for nav_realm in policy.navigation_tree():
        realm = nav_realm.realm
        st.markdown(f"### {STATE_ICONS[nav_realm.state]} {realm.name}")
        st.caption(f"{realm.focus}: {realm.description}")


def render_realm_view(realm_id: int):
    catalog = st.session_state.catalog
    policy = st.session_state.policy

    st.title(catalog.realm_name(realm_id))
    if policy.is_realm_locked(realm_id):
        st.warning("This realm is still locked. Complete the previous realm to enter.")
        if st.button("Back to map"):
            navigate(MAP_PATH)
        return

    for mission in catalog.missions_for_realm(realm_id):
        availability = policy.mission_availability(mission.number, realm_id)
        prefix = "✓ " if availability == MissionAvailability.COMPLETED else ""
        if st.button(
            f"{prefix}Mission {mission.number}: {mission.title}",
            key=f"mission_{realm_id}_{mission.number}",
            disabled=availability == MissionAvailability.LOCKED,
            use_container_width=True,
        ):
            navigate(mission_path(realm_id, mission.number))


def render_mission_view(realm_raw: str, mission_raw: str):
    catalog = st.session_state.catalog
    store = st.session_state.store
    policy = st.session_state.policy

    result = asyncio.run(st.session_state.session.navigate(realm_raw, mission_raw))
    if result is None:
        return

    if not result.ok:
        notice = notice_for_result(result, catalog)
        st.markdown(get_not_found_css(), unsafe_allow_html=True)
        st.markdown(render_not_found_html(notice), unsafe_allow_html=True)
        if st.button(notice.return_label):
            navigate(notice.return_path)
        return

    ref = result.content_ref
    if policy.is_mission_locked(ref.mission_number, ref.realm_id):
        st.warning("Complete the previous mission to unlock this one.")
        if st.button("Back to realm"):
            navigate(realm_path(ref.realm_id))
        return

    st.title(ref.title)
    st.caption(ref.subtitle)
    st.info(f"Content module: {ref.locator}")

    passage = st.text_input("Save a passage to your backpack")
    if st.button("Add to backpack", disabled=not passage):
        store.add_to_backpack(passage, ref.full_mission_id, ref.realm_id)
        st.rerun()

    st.divider()
    if ref.full_mission_id in store.completed_missions:
        st.success("Mission completed!")
    elif st.button("Complete mission", type="primary", use_container_width=True):
        outcome = policy.on_mission_completed(ref.mission_number, ref.realm_id)
        if outcome.unlocked_realm:
            st.balloons()
            st.success(f"You unlocked {catalog.realm_name(outcome.unlocked_realm)}!")
        navigate(realm_path(ref.realm_id))


# -----------------------------------------------------------------------------
# Main App
# -----------------------------------------------------------------------------

def main():
    """Main application entry point."""
    init_session_state()
    render_sidebar()

    location = st.session_state.location
    mission_pair = parse_mission_path(location)
    if mission_pair:
        render_mission_view(*mission_pair)
    elif location.startswith("/realm/") and location.rstrip("/").rsplit("/", 1)[-1].isdigit():
        render_realm_view(int(location.rstrip("/").rsplit("/", 1)[-1]))
    else:
        render_map_view()


if __name__ == "__main__":
    main()
