"""Serializes cues into subtitle files (WebVTT, SRT, plain text, ASS)."""

import logging
from abc import ABC, abstractmethod
from typing import Dict, List, Sequence, Type

from .models import Cue
from .exceptions import FormattingError
from .utils import format_time_ass, format_time_srt, parse_timestamp

logger = logging.getLogger(__name__)

VTT_HEADER = "WEBVTT"

ASS_HEADER = """[Script Info]
Title: Converted Subtitles
ScriptType: v4.00+

[V4+ Styles]
Format: Name, Fontname, Fontsize, PrimaryColour, SecondaryColour, OutlineColour, BackColour, Bold, Italic, Underline, StrikeOut, ScaleX, ScaleY, Spacing, Angle, BorderStyle, Outline, Shadow, Alignment, MarginL, MarginR, MarginV, Encoding
Style: Default,Arial,20,&H00FFFFFF,&H000000FF,&H00000000,&H00000000,0,0,0,0,100,100,0,0,1,2,0,2,10,10,10,1

[Events]
Format: Layer, Start, End, Style, Name, MarginL, MarginR, MarginV, Effect, Text
"""

class SubtitleFormatter(ABC):
    """Abstract base class for subtitle formatters."""

    extension: str = ""

    @abstractmethod
    def format_cues(self, cues: Sequence[Cue]) -> str:
        """
        Renders cues as the text of a subtitle document.

        Args:
            cues: Cues in display order. Timestamps are HH:MM:SS.mmm strings.

        Returns:
            The complete document. Output depends only on ``cues``.
        """
        pass

    def write(self, cues: Sequence[Cue], output_path: str) -> None:
        """
        Formats cues and writes them to ``output_path`` as UTF-8.

        Raises:
            FormattingError: If the file cannot be written.
        """
        logger.info(f"Writing {len(cues)} cues as {self.extension.upper()} to: {output_path}")
        try:
            with open(output_path, 'w', encoding='utf-8') as f:
                f.write(self.format_cues(cues))
        except IOError as e:
            logger.error(f"Failed to write {self.extension.upper()} file to {output_path}: {e}", exc_info=True)
            raise FormattingError(f"Could not write {self.extension.upper()} file: {e}") from e


class VTTFormatter(SubtitleFormatter):
    """Formats cues into WebVTT, the cue format the editor and the encoder consume."""

    extension = "vtt"

    def format_cues(self, cues: Sequence[Cue]) -> str:
        parts = [f"{VTT_HEADER}\n\n"]
        for index, cue in enumerate(cues, start=1):
            label = cue.label if cue.label else str(index)
            parts.append(f"{label}\n{cue.start_time} --> {cue.end_time}\n{cue.text}\n\n")
        return "".join(parts)


class SRTFormatter(SubtitleFormatter):
    """Formats cues into the SRT (SubRip Text) format."""

    extension = "srt"

    def format_cues(self, cues: Sequence[Cue]) -> str:
        parts = []
        # Stored labels are ignored; SRT is always numbered from 1
        for index, cue in enumerate(cues, start=1):
            start_time_str = format_time_srt(parse_timestamp(cue.start_time))
            end_time_str = format_time_srt(parse_timestamp(cue.end_time))
            parts.append(f"{index}\n{start_time_str} --> {end_time_str}\n{cue.text}\n\n")
        return "".join(parts).strip()


class TXTFormatter(SubtitleFormatter):
    """Plain transcript: one paragraph per cue, no timing."""

    extension = "txt"

    def format_cues(self, cues: Sequence[Cue]) -> str:
        return "\n\n".join(cue.text for cue in cues)


class ASSFormatter(SubtitleFormatter):
    """Formats cues into an Advanced SubStation Alpha script with a single Default style."""

    extension = "ass"

    def format_cues(self, cues: Sequence[Cue]) -> str:
        lines = [ASS_HEADER]
        for cue in cues:
            start = format_time_ass(parse_timestamp(cue.start_time))
            end = format_time_ass(parse_timestamp(cue.end_time))
            lines.append(f"Dialogue: 0,{start},{end},Default,,0,0,0,,{cue.text}\n")
        return "".join(lines)


FORMATTERS: Dict[str, Type[SubtitleFormatter]] = {
    'vtt': VTTFormatter,
    'srt': SRTFormatter,
    'txt': TXTFormatter,
    'ass': ASSFormatter,
}

def supported_formats() -> List[str]:
    return list(FORMATTERS)

def get_formatter(output_format: str) -> SubtitleFormatter:
    """
    Returns a formatter instance for the given format name (case-insensitive).

    Raises:
        FormattingError: If the format is not supported.
    """
    key = (output_format or "").lower()
    if key not in FORMATTERS:
        raise FormattingError(f"Unsupported subtitle format '{output_format}'. Choose one of: {', '.join(FORMATTERS)}")
    return FORMATTERS[key]()
