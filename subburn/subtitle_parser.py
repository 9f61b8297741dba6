"""Parses WebVTT cue documents back into Cue records."""

import logging
from enum import Enum
from typing import Iterator, List, Optional, Tuple

from .exceptions import FileSystemError
from .models import Cue, CueDocument, ParseEvent, ParseEventKind
from .subtitle_formatter import VTT_HEADER

logger = logging.getLogger(__name__)

ARROW = "-->"

class ParserState(Enum):
    EXPECT_ID_OR_TIMESTAMP = 0
    EXPECT_TIMESTAMP = 1
    EXPECT_TEXT = 2


def _split_timing(line: str) -> Tuple[str, str]:
    start, _, end = line.partition(ARROW)
    return start.strip(), end.strip()


class _PendingCue:
    """Cue under construction while the parser walks the document."""

    def __init__(self, label: Optional[str] = None, line_number: int = 0):
        self.label = label
        self.line_number = line_number
        self.start_time: Optional[str] = None
        self.end_time: Optional[str] = None
        self.text_lines: List[str] = []

    @property
    def has_timing(self) -> bool:
        return self.start_time is not None

    def set_timing(self, line: str) -> None:
        self.start_time, self.end_time = _split_timing(line)


def iter_parse_events(document: str) -> Iterator[ParseEvent]:
    """
    Walks a cue document line by line and reports what happened to each block.

    The parser never fails. Every finished cue is reported as CUE_EMITTED;
    fragments that cannot form a cue (a label with no timestamp after it, or
    a timestamp with no text) are reported as LINE_SKIPPED with a reason.
    Cues without a label line get their zero-based emission index as label.
    """
    lines = (document or "").split('\n')
    state = ParserState.EXPECT_ID_OR_TIMESTAMP
    pending: Optional[_PendingCue] = None
    emitted = 0

    def finish(current: _PendingCue) -> Optional[ParseEvent]:
        nonlocal emitted
        if not current.has_timing:
            return None
        if not current.text_lines:
            return ParseEvent(ParseEventKind.LINE_SKIPPED, current.line_number, reason="timestamp_without_text")
        label = current.label if current.label is not None else str(emitted)
        cue = Cue(start_time=current.start_time, end_time=current.end_time,
                  text=" ".join(current.text_lines), label=label)
        emitted += 1
        return ParseEvent(ParseEventKind.CUE_EMITTED, current.line_number, cue=cue)

    i = 0
    while i < len(lines):
        line = lines[i].strip()
        line_number = i + 1

        if line == VTT_HEADER:
            yield ParseEvent(ParseEventKind.LINE_SKIPPED, line_number, reason="header")
            i += 1
            continue

        if not line:
            if pending is not None:
                event = finish(pending)
                if event is not None:
                    yield event
                elif state == ParserState.EXPECT_TIMESTAMP:
                    yield ParseEvent(ParseEventKind.LINE_SKIPPED, pending.line_number, reason="label_without_timestamp")
            pending = None
            state = ParserState.EXPECT_ID_OR_TIMESTAMP
            i += 1
            continue

        if state == ParserState.EXPECT_ID_OR_TIMESTAMP:
            if ARROW in line:
                pending = _PendingCue(line_number=line_number)
                pending.set_timing(line)
                state = ParserState.EXPECT_TEXT
            else:
                pending = _PendingCue(label=line, line_number=line_number)
                state = ParserState.EXPECT_TIMESTAMP

        elif state == ParserState.EXPECT_TIMESTAMP:
            if ARROW in line:
                pending.set_timing(line)
                state = ParserState.EXPECT_TEXT
            else:
                # Label not followed by a timestamp: drop it and read this line again from the start state
                yield ParseEvent(ParseEventKind.LINE_SKIPPED, pending.line_number, reason="label_without_timestamp")
                pending = None
                state = ParserState.EXPECT_ID_OR_TIMESTAMP
                continue

        elif state == ParserState.EXPECT_TEXT:
            if ARROW in line:
                # Previous block ended without a blank line
                event = finish(pending)
                if event is not None:
                    yield event
                pending = _PendingCue(line_number=line_number)
                pending.set_timing(line)
            else:
                pending.text_lines.append(line)

        i += 1

    if pending is not None:
        event = finish(pending)
        if event is not None:
            yield event
        elif state == ParserState.EXPECT_TIMESTAMP:
            yield ParseEvent(ParseEventKind.LINE_SKIPPED, pending.line_number, reason="label_without_timestamp")


def parse_vtt(document: str) -> List[Cue]:
    """Parses a cue document, returning only the cues that could be read."""
    cues = []
    skipped = 0
    for event in iter_parse_events(document):
        if event.kind == ParseEventKind.CUE_EMITTED:
            cues.append(event.cue)
        elif event.reason != "header":
            skipped += 1
            logger.debug(f"Dropped malformed cue fragment at line {event.line_number}: {event.reason}")
    if skipped:
        logger.info(f"Parsed {len(cues)} cues; dropped {skipped} malformed fragment(s).")
    return cues


def parse_vtt_document(document: str) -> CueDocument:
    return CueDocument(parse_vtt(document))


def load_vtt_file(vtt_path: str) -> CueDocument:
    """
    Reads and parses a cue file from disk.

    Raises:
        FileSystemError: If the file cannot be read.
    """
    logger.info(f"Loading subtitles from: {vtt_path}")
    try:
        with open(vtt_path, 'r', encoding='utf-8') as f:
            content = f.read()
    except (IOError, UnicodeDecodeError) as e:
        logger.error(f"Could not read subtitle file {vtt_path}: {e}", exc_info=True)
        raise FileSystemError(f"Could not read subtitle file {vtt_path}: {e}") from e
    return parse_vtt_document(content)
