"""Utility functions for embedsub."""

import os
import logging
from typing import Optional
from .exceptions import FileSystemError

logger = logging.getLogger(__name__)

EXTRACTED_SUFFIX = ".extracted.srt"

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

def video_base_path(video_path: str) -> str:
    """Returns the video path without its extension (same directory, same basename)."""
    return os.path.splitext(video_path)[0]

def extracted_subtitle_path(video_path: str) -> str:
    """Path of the intermediate SRT file written next to the video."""
    return video_base_path(video_path) + EXTRACTED_SUFFIX

def translated_subtitle_path(video_path: str, language_code: str) -> str:
    """Path of the final translated SRT file, e.g. ``movie.es.srt``."""
    return f"{video_base_path(video_path)}.{language_code}.srt"

def file_has_content(file_path: Optional[str]) -> bool:
    """True when the file exists and is non-empty."""
    return bool(file_path) and os.path.isfile(file_path) and os.path.getsize(file_path) > 0

def remove_file(file_path: Optional[str]) -> bool:
    """
    Removes a file if it exists, logging (not raising) on failure.

    Returns:
        True if a file was removed.
    """
    if not file_path or not os.path.exists(file_path):
        return False
    try:
        os.remove(file_path)
        logger.debug(f"Removed file: {file_path}")
        return True
    except OSError as e:
        logger.warning(f"Could not remove file {file_path}: {e}")
        return False

def write_text_atomic(file_path: str, content: str) -> None:
    """
    Writes text to a temporary sibling file, then renames it over the target.

    A failure part-way never leaves a partially written target behind.

    Raises:
        FileSystemError: If the file cannot be written.
    """
    directory = os.path.dirname(file_path) or "."
    temp_path = os.path.join(directory, f".{os.path.basename(file_path)}.tmp")
    try:
        with open(temp_path, 'w', encoding='utf-8') as f:
            f.write(content)
        os.replace(temp_path, file_path)
    except OSError as e:
        remove_file(temp_path)
        logger.error(f"Failed to write {file_path}: {e}", exc_info=True)
        raise FileSystemError(f"Could not write file {file_path}: {e}") from e
