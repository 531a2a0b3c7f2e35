"""Utility functions for whispersub."""

import os
import logging
from typing import Iterable

from .exceptions import FileSystemError

logger = logging.getLogger(__name__)

def ensure_dir_exists(dir_path: str) -> None:
    """
    Ensures that a directory exists. Creates it if it doesn't.

    Args:
        dir_path: The path to the directory.

    Raises:
        FileSystemError: If the directory cannot be created due to permissions
                         or if the path exists but is not a directory.
    """
    if not dir_path:
        raise ValueError("Directory path cannot be empty.")
    try:
        if not os.path.exists(dir_path):
            os.makedirs(dir_path)
            logger.info(f"Created directory: {dir_path}")
        elif not os.path.isdir(dir_path):
            raise FileSystemError(f"Path exists but is not a directory: {dir_path}")
    except OSError as e:
        logger.error(f"Error creating or accessing directory {dir_path}: {e}", exc_info=True)
        raise FileSystemError(f"Could not create or access directory {dir_path}: {e}") from e

def derive_path(base_path: str, suffix: str, extension: str) -> str:
    """
    Builds a sibling path of ``base_path`` with a suffix and a new extension.

    ``derive_path("/a/talk.mp4", "_chunk_2", "srt")`` gives ``/a/talk_chunk_2.srt``.
    Only the last extension is replaced; dots elsewhere in the name are kept.

    Args:
        base_path: The source file path.
        suffix: Text appended to the file stem (may be empty).
        extension: New extension, with or without a leading dot.

    Returns:
        The derived path, in the same directory as ``base_path``.
    """
    directory, filename = os.path.split(base_path)
    stem = os.path.splitext(filename)[0]
    extension = extension.lstrip('.')
    return os.path.join(directory, f"{stem}{suffix}.{extension}")

def extension_of(path: str) -> str:
    """Lower-cased extension of ``path`` including the dot, e.g. '.mp4'."""
    return os.path.splitext(path)[1].lower()

def language_slug(language: str) -> str:
    """'Traditional Chinese' -> 'traditional-chinese'."""
    return language.strip().lower().replace(' ', '-')

def read_text(path: str) -> str:
    """Reads a UTF-8 text file, wrapping I/O failures in FileSystemError."""
    try:
        with open(path, 'r', encoding='utf-8') as f:
            return f.read()
    except OSError as e:
        raise FileSystemError(f"Could not read {path}: {e}") from e

def write_text(path: str, content: str) -> None:
    """Writes a UTF-8 text file, wrapping I/O failures in FileSystemError."""
    try:
        with open(path, 'w', encoding='utf-8') as f:
            f.write(content)
    except OSError as e:
        raise FileSystemError(f"Could not write {path}: {e}") from e

def remove_files(file_paths: Iterable[str]) -> None:
    """Removes the given files. Missing files and removal errors are only logged."""
    for file_path in file_paths:
        if file_path and os.path.exists(file_path):
            try:
                os.remove(file_path)
                logger.debug(f"Cleaned up temporary file: {file_path}")
            except OSError as e:
                logger.warning(f"Could not remove temporary file {file_path}: {e}", exc_info=False)
