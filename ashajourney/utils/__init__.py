"""Asha Journey utilities."""

from .data_loader import DATA_DIR, load_yaml, resolve_data_path, get_available_data_files

__all__ = [
    "DATA_DIR",
    "load_yaml",
    "resolve_data_path",
    "get_available_data_files",
]
