"""Utility functions for SubBurn."""

import math
import os
import re
import logging
from .exceptions import FileSystemError

logger = logging.getLogger(__name__)

_WHOLE_FIELD = re.compile(r"\d+")
_SECONDS_FIELD = re.compile(r"\d+(?:\.\d+)?")

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

def _split_millis(seconds: float):
    if seconds < 0:
        seconds = 0.0 # Ensure non-negative time
    milliseconds = round(seconds * 1000)
    hrs = milliseconds // 3600000
    milliseconds %= 3600000
    mins = milliseconds // 60000
    milliseconds %= 60000
    secs = milliseconds // 1000
    milliseconds %= 1000
    return hrs, mins, secs, milliseconds

def format_time_vtt(seconds: float) -> str:
    """
    Formats seconds into the cue-format (WebVTT) time HH:MM:SS.mmm.

    Args:
        seconds: Time in seconds.

    Returns:
        Formatted time string.
    """
    hrs, mins, secs, milliseconds = _split_millis(seconds)
    return f"{hrs:02d}:{mins:02d}:{secs:02d}.{milliseconds:03d}"

def format_time_srt(seconds: float) -> str:
    """
    Formats seconds into SRT time format HH:MM:SS,ms.

    Args:
        seconds: Time in seconds.

    Returns:
        Formatted time string.
    """
    hrs, mins, secs, milliseconds = _split_millis(seconds)
    return f"{hrs:02d}:{mins:02d}:{secs:02d},{milliseconds:03d}"

def format_time_ass(seconds: float) -> str:
    """Formats seconds into the ASS script time H:MM:SS.cc (centiseconds)."""
    if seconds < 0:
        seconds = 0.0
    centiseconds = round(seconds * 100)
    hrs = centiseconds // 360000
    centiseconds %= 360000
    mins = centiseconds // 6000
    centiseconds %= 6000
    secs = centiseconds // 100
    centiseconds %= 100
    return f"{hrs}:{mins:02d}:{secs:02d}.{centiseconds:02d}"

def parse_timestamp(timestamp: str) -> float:
    """
    Converts an HH:MM:SS.mmm timestamp into total seconds.

    Anything that is not three colon-separated numeric fields yields 0.0,
    which callers treat as an unknown time rather than a real one.

    Args:
        timestamp: Cue-format timestamp string.

    Returns:
        Total seconds, or 0.0 if the timestamp could not be read.
    """
    if not timestamp:
        return 0.0
    parts = timestamp.strip().split(':')
    if len(parts) != 3:
        return 0.0
    hours, minutes, seconds = parts
    # plain digits only: float() would also take "nan", "inf", "1e400" or "+1"
    if not (_WHOLE_FIELD.fullmatch(hours) and _WHOLE_FIELD.fullmatch(minutes)
            and _SECONDS_FIELD.fullmatch(seconds)):
        logger.debug(f"Unreadable timestamp treated as unknown: {timestamp!r}")
        return 0.0
    try:
        total = int(hours) * 3600 + int(minutes) * 60 + float(seconds)
    except (OverflowError, ValueError):
        # huge digit runs overflow, or exceed the int conversion limit
        total = math.inf
    if not math.isfinite(total):
        logger.debug(f"Out of range timestamp treated as unknown: {timestamp!r}")
        return 0.0
    return total
