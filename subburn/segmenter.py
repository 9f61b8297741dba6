"""Splits transcript segments into readable subtitle cues."""

import logging
import re
from typing import Callable, List, Optional, Sequence, Tuple

from .models import Cue, CueDocument, TranscriptSegment
from .subtitle_formatter import VTTFormatter
from .utils import format_time_vtt

logger = logging.getLogger(__name__)

MAX_SINGLE_CUE_CHARS = 70
MAX_SINGLE_CUE_SECONDS = 4.0
MAX_LINE_CHARS = 60
FALLBACK_WORDS_PER_CUE = 7
FALLBACK_TOTAL_UNITS = 100.0

# "a.m.", "p.m.", "am.", "P.M." ... the trailing dot would otherwise look like a sentence end
_AM_PM_PATTERN = re.compile(r"\b([AaPp])\.?[Mm]\.")
# Break after . ! ? , when followed by whitespace. Quotes and apostrophes never split.
_PHRASE_BREAK_PATTERN = re.compile(r"(?<=[.!?,])\s+")

TimedText = Tuple[float, float, str]


def sanitize_text(text: str) -> str:
    """Rewrites a.m./p.m. style abbreviations to am/pm so they are not read as sentence breaks."""
    return _AM_PM_PATTERN.sub(lambda m: f"{m.group(1).lower()}m", text)


def wrap_words(text: str, max_chars: int = MAX_LINE_CHARS) -> List[str]:
    """
    Greedy word wrap.

    Words are added to the current line until the next one would push it past
    ``max_chars``; then the line is closed and the word starts a new one. A
    single word longer than ``max_chars`` stays on its own line.
    """
    lines = []
    current_line = ""
    for word in text.split():
        if current_line and len(current_line) + 1 + len(word) > max_chars:
            lines.append(current_line)
            current_line = word
        else:
            current_line = f"{current_line} {word}" if current_line else word
    if current_line:
        lines.append(current_line)
    return lines


def split_into_phrases(text: str) -> List[str]:
    """Splits text after sentence/phrase punctuation, dropping empty fragments."""
    return [fragment.strip() for fragment in _PHRASE_BREAK_PATTERN.split(text) if fragment.strip()]


def layout_proportionally(pieces: Sequence[str], start: float, end: float) -> List[TimedText]:
    """
    Lays ``pieces`` out back to back over ``[start, end]``.

    Each piece gets a share of the duration proportional to its character
    count. The last piece always ends exactly at ``end``.
    """
    total_chars = sum(len(piece) for piece in pieces)
    if not pieces or total_chars == 0:
        return []
    time_per_char = (end - start) / total_chars

    timed = []
    current_start = start
    for i, piece in enumerate(pieces):
        if i == len(pieces) - 1:
            piece_end = end
        else:
            piece_end = current_start + len(piece) * time_per_char
        timed.append((current_start, piece_end, piece))
        current_start = piece_end
    return timed


class CueSegmenter:
    """
    Turns coarse transcript segments into display cues.

    Segments that are short in both text and duration pass through as one cue.
    Longer ones are split on phrase punctuation, over-long phrases are word
    wrapped, and the segment's time span is shared out by character count.

    Degenerate input (missing timing, blank text, non-positive duration) is
    skipped rather than rejected. Each skip is recorded in ``warnings`` and,
    if given, passed to ``on_warning``.
    """

    def __init__(
        self,
        max_single_cue_chars: int = MAX_SINGLE_CUE_CHARS,
        max_single_cue_seconds: float = MAX_SINGLE_CUE_SECONDS,
        max_line_chars: int = MAX_LINE_CHARS,
        on_warning: Optional[Callable[[str], None]] = None,
    ):
        self.max_single_cue_chars = max_single_cue_chars
        self.max_single_cue_seconds = max_single_cue_seconds
        self.max_line_chars = max_line_chars
        self.on_warning = on_warning
        self.warnings: List[str] = []

    def _warn(self, message: str) -> None:
        self.warnings.append(message)
        logger.debug(message)
        if self.on_warning is not None:
            self.on_warning(message)

    def segment(self, segments: Sequence[TranscriptSegment], full_text: str = "") -> CueDocument:
        """
        Builds a cue document from transcript segments.

        Args:
            segments: Segments in the order the provider returned them. No
                      reordering is done; out-of-order input stays out of order.
            full_text: Unsegmented transcript used only when ``segments`` is empty.

        Returns:
            A CueDocument. Cue labels are 1-based positions.
        """
        self.warnings = []
        if not segments:
            return self.segment_full_text(full_text)

        timed: List[TimedText] = []
        for i, segment in enumerate(segments):
            text = (segment.text or "").strip()
            if segment.start_time is None or segment.end_time is None:
                self._warn(f"Segment {i}: missing start or end time, skipped.")
                continue
            if not text:
                self._warn(f"Segment {i}: empty text, skipped.")
                continue
            duration = segment.end_time - segment.start_time
            if duration <= 0:
                self._warn(f"Segment {i}: non-positive duration ({duration:.3f}s), skipped.")
                continue

            text = sanitize_text(text)
            if len(text) <= self.max_single_cue_chars and duration < self.max_single_cue_seconds:
                timed.append((segment.start_time, segment.end_time, text))
            else:
                pieces = self.split_segment_text(text)
                logger.debug(f"Split segment {i} ({len(text)} chars, {duration:.2f}s) into {len(pieces)} cues.")
                timed.extend(layout_proportionally(pieces, segment.start_time, segment.end_time))

        return self._to_document(timed)

    def split_segment_text(self, text: str) -> List[str]:
        """Phrase split first; phrases longer than the line limit (or unsplittable text) are word wrapped."""
        phrases = split_into_phrases(text)
        if len(phrases) <= 1:
            return wrap_words(text, self.max_line_chars)

        pieces = []
        for phrase in phrases:
            if len(phrase) > self.max_line_chars:
                pieces.extend(wrap_words(phrase, self.max_line_chars))
            else:
                pieces.append(phrase)
        return pieces

    def segment_full_text(self, full_text: str) -> CueDocument:
        """
        Degraded mode for transcripts without segment timing.

        Groups words into fixed-size cues and spreads them over an assumed
        0-100 second span by word count. The resulting times are an
        approximation only and do not line up with the audio.
        """
        self.warnings = []
        words = (full_text or "").split()
        if not words:
            return CueDocument()

        logger.warning("No timed segments available; using approximate word-count timing for subtitles.")
        self._warn("Transcript had no segments; cue timing is approximate.")
        total_words = len(words)
        timed = []
        for i in range(0, total_words, FALLBACK_WORDS_PER_CUE):
            chunk = " ".join(words[i:i + FALLBACK_WORDS_PER_CUE])
            start = i / total_words * FALLBACK_TOTAL_UNITS
            end = min((i + FALLBACK_WORDS_PER_CUE) / total_words * FALLBACK_TOTAL_UNITS, FALLBACK_TOTAL_UNITS)
            timed.append((start, end, chunk))
        return self._to_document(timed)

    @staticmethod
    def _to_document(timed: List[TimedText]) -> CueDocument:
        return CueDocument([
            Cue(start_time=format_time_vtt(start), end_time=format_time_vtt(end), text=text, label=str(n))
            for n, (start, end, text) in enumerate(timed, start=1)
        ])


def segments_to_vtt(segments: Sequence[TranscriptSegment], full_text: str = "") -> str:
    """Segments a transcript and serializes it to the cue format in one step."""
    return VTTFormatter().format_cues(CueSegmenter().segment(segments, full_text).cues)
