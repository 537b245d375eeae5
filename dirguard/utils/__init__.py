"""Utility helpers for the scanner."""

from .fileio import read_bytes_file, read_text_file, read_yaml_file

__all__ = [
    "read_yaml_file",
    "read_text_file",
    "read_bytes_file",
]
