"""
Data loader utility for Asha Journey.

Loads YAML data files bundled in the ashajourney/data/ directory.
"""

from pathlib import Path
from typing import Any
import yaml


# Bundled data directory
DATA_DIR = Path(__file__).parent.parent / "data"


def resolve_data_path(name: str, data_dir: Path | None = None) -> Path:
    """Return the path of a bundled YAML file (name without .yaml extension)."""
    dir_path = data_dir or DATA_DIR
    return dir_path / f"{name}.yaml"


def load_yaml(file_path: Path) -> dict[str, Any]:
    """
    Load a YAML mapping from a file.

    Args:
        file_path: Path to the YAML file

    Returns:
        Parsed mapping

    Raises:
        FileNotFoundError: If the file doesn't exist
        yaml.YAMLError: If YAML parsing fails
        ValueError: If the document is not a mapping
    """
    if not file_path.exists():
        raise FileNotFoundError(f"Data file not found: {file_path}")

    with open(file_path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)

    if not isinstance(data, dict):
        raise ValueError(f"Expected a mapping at the top of {file_path}")
    return data


def get_available_data_files(data_dir: Path | None = None) -> list[str]:
    """List bundled data files (names without .yaml extension)."""
    dir_path = data_dir or DATA_DIR
    if not dir_path.exists():
        return []
    return sorted(p.stem for p in dir_path.glob("*.yaml"))
