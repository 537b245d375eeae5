"""Collect source files under a directory and merge them into one blob.

Each file is emitted behind a ``// <path>`` header line, so the merged output
can be pasted into a review or an LLM prompt and still be traced back to the
originating files. A git patch rendering is also available.
"""

from __future__ import annotations

import logging
import os
from enum import Enum
from pathlib import Path
from typing import Iterable, List, Sequence, Tuple

from .errors import DirectoryEnumerationError
from .options import DEFAULT_IGNORE_PREFIXES, matches_ignore
from .utils import read_bytes_file, read_text_file

logger = logging.getLogger(__name__)


class ConcatenationStyle(str, Enum):
    STRING = "string"
    DATA = "data"


def relevant_source_files(
    directory: Path,
    ignoring_suffixes: Sequence[str] = (),
    allowed_suffixes: Sequence[str] = (),
) -> List[Path]:
    """Return regular files below ``directory`` that survive the ignore rules.

    Every component of an entry's path relative to ``directory`` is matched
    against the default ignore list plus ``ignoring_suffixes``, as both a
    prefix and a suffix. Ignored directories are not descended. When
    ``allowed_suffixes`` is non-empty only file names ending in one of them
    are kept.
    """

    ignores = tuple(DEFAULT_IGNORE_PREFIXES) + tuple(ignoring_suffixes)
    try:
        with os.scandir(directory) as iterator:
            top = sorted(iterator, key=lambda entry: entry.name)
    except OSError as exc:
        raise DirectoryEnumerationError(f"Unable to enumerate directory: {directory}") from exc

    relevant: List[Path] = []
    pending: List[Tuple[Tuple[str, ...], List[os.DirEntry]]] = [((), top)]
    while pending:
        relative, entries = pending.pop()
        for entry in reversed(entries):
            parts = relative + (entry.name,)
            if any(matches_ignore(part, ignores) for part in parts):
                logger.debug("Ignoring %s", entry.path)
                continue
            try:
                if entry.is_dir(follow_symlinks=False):
                    with os.scandir(entry.path) as iterator:
                        children = sorted(iterator, key=lambda child: child.name)
                    pending.append((parts, children))
                    continue
                if not entry.is_file(follow_symlinks=False):
                    continue
            except OSError as exc:
                logger.debug("Skipping %s: %s", entry.path, exc)
                continue
            if allowed_suffixes and not any(entry.name.endswith(suffix) for suffix in allowed_suffixes):
                continue
            relevant.append(Path(entry.path))

    relevant.sort()
    logger.info("Found %d relevant files in %s", len(relevant), directory)
    return relevant


def concatenate_to_string(source_files: Iterable[Path]) -> str:
    chunks: List[str] = []
    for path in source_files:
        contents = read_text_file(path)
        if contents is None:
            logger.error("Unable to read file: %s", path)
            continue
        chunks.append(f"// {path}\n{contents}\n")
    return "".join(chunks)


def concatenate_to_bytes(source_files: Iterable[Path]) -> bytes:
    buffer = bytearray()
    for path in source_files:
        contents = read_bytes_file(path)
        if contents is None:
            logger.error("Unable to read file: %s", path)
            continue
        buffer += f"// {path}\n".encode("utf-8")
        buffer += contents
        buffer += b"\n"
    return bytes(buffer)


def generate_single_file(
    source_files: Sequence[Path],
    destination: Path,
    style: ConcatenationStyle = ConcatenationStyle.STRING,
) -> None:
    """Write the merged contents of ``source_files`` to ``destination``."""

    if ConcatenationStyle(style) == ConcatenationStyle.STRING:
        contents = concatenate_to_string(source_files)
    else:
        contents = concatenate_to_bytes(source_files).decode("utf-8", errors="replace")
    destination.write_text(contents, encoding="utf-8")


def generate_git_patch(source_files: Iterable[Path]) -> str:
    """Render each file as a new-file diff from ``/dev/null``."""

    patch: List[str] = []
    for path in source_files:
        contents = read_text_file(path)
        if contents is None:
            logger.error("Unable to read file: %s", path)
            continue
        lines = contents.split("\n")
        line_count = len(lines) - 1 if lines[-1] == "" else len(lines)
        patch.append(f"diff --git a/{path} b/{path}\n")
        patch.append("new file mode 100644\n")
        patch.append("--- /dev/null\n")
        patch.append(f"+++ b/{path}\n")
        patch.append(f"@@ -0,0 +1,{line_count} @@\n")
        patch.extend(f"+{line}\n" for line in lines[:line_count])
    return "".join(patch)


def write_git_patch(source_files: Sequence[Path], destination: Path) -> None:
    destination.write_text(generate_git_patch(source_files), encoding="utf-8")
