"""Saving edited subtitle tracks and exporting them to other formats."""

import logging
import os
import shutil
import time

from .exceptions import FormattingError
from .subtitle_formatter import get_formatter
from .subtitle_parser import load_vtt_file
from .utils import ensure_dir_exists

logger = logging.getLogger(__name__)

def save_subtitles(vtt_content: str, uploads_dir: str) -> str:
    """
    Stores an edited WebVTT document as ``subtitles_<epoch ms>.vtt``.

    The content is written as given; it is not re-validated.

    Returns:
        The path of the new file.

    Raises:
        FormattingError: If ``vtt_content`` is empty or cannot be written.
    """
    if not vtt_content:
        raise FormattingError("VTT content is required")
    ensure_dir_exists(uploads_dir)
    filepath = os.path.join(uploads_dir, f"subtitles_{int(time.time() * 1000)}.vtt")
    try:
        with open(filepath, 'w', encoding='utf-8') as f:
            f.write(vtt_content)
    except IOError as e:
        logger.error(f"Failed to save subtitles to {filepath}: {e}", exc_info=True)
        raise FormattingError(f"Failed to save subtitles: {e}") from e
    logger.info(f"Saved edited subtitles to: {filepath}")
    return filepath

def export_subtitles(vtt_path: str, output_format: str, output_dir: str) -> str:
    """
    Converts a WebVTT file to ``output_dir/subtitles.<format>``.

    A ``vtt`` export copies the source verbatim instead of re-serializing it.

    Raises:
        FormattingError: For unsupported formats or write failures.
        FileSystemError: If the source cannot be read.
    """
    formatter = get_formatter(output_format)
    ensure_dir_exists(output_dir)
    output_path = os.path.join(output_dir, f"subtitles.{formatter.extension}")

    if formatter.extension == 'vtt':
        try:
            shutil.copyfile(vtt_path, output_path)
        except OSError as e:
            raise FormattingError(f"Could not copy {vtt_path} to {output_path}: {e}") from e
        logger.info(f"Copied subtitles to: {output_path}")
        return output_path

    document = load_vtt_file(vtt_path)
    formatter.write(document.cues, output_path)
    return output_path
