"""Data models for SubBurn."""

import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, List, Optional

from .exceptions import ConfigurationError

@dataclass
class TranscriptSegment:
    """Represents a single timed chunk of text as returned by the transcription provider."""
    start_time: Optional[float]
    end_time: Optional[float]
    text: str

@dataclass
class TranscriptionResult:
    """Holds the structured output from the ASR process."""
    language: Optional[str]
    segments: List[TranscriptSegment] = field(default_factory=list)
    full_text: str = "" # Unsegmented transcript, used when segments are missing
    original_audio_path: Optional[str] = None # Keep track of source if needed

def _new_cue_id() -> str:
    return uuid.uuid4().hex

@dataclass
class Cue:
    """One timed caption entry. Timestamps are kept as HH:MM:SS.mmm strings."""
    start_time: str
    end_time: str
    text: str
    label: Optional[str] = None
    cue_id: str = field(default_factory=_new_cue_id, compare=False)

    def __post_init__(self):
        # edge whitespace does not survive the cue format
        if self.text:
            self.text = self.text.strip()

    def timing(self):
        return (self.start_time, self.end_time, self.text)


class CueDocument:
    """
    The current subtitle track: an ordered list of cues.

    Cues are addressed by their ``cue_id`` rather than by position so an
    editor can insert or remove entries without invalidating references to
    the others.
    """

    def __init__(self, cues: Optional[List[Cue]] = None):
        self._cues: List[Cue] = list(cues or [])

    def __len__(self) -> int:
        return len(self._cues)

    def __iter__(self) -> Iterator[Cue]:
        return iter(self._cues)

    def __getitem__(self, index: int) -> Cue:
        return self._cues[index]

    @property
    def cues(self) -> List[Cue]:
        return list(self._cues)

    def _index_of(self, cue_id: str) -> int:
        for i, cue in enumerate(self._cues):
            if cue.cue_id == cue_id:
                return i
        raise KeyError(f"No cue with id {cue_id!r}")

    def get(self, cue_id: str) -> Cue:
        return self._cues[self._index_of(cue_id)]

    def append(self, cue: Cue) -> Cue:
        self._cues.append(cue)
        return cue

    def insert_after(self, cue_id: Optional[str], cue: Cue) -> Cue:
        """Inserts ``cue`` right after the cue with ``cue_id``, or appends it when ``cue_id`` is None."""
        if cue_id is None:
            return self.append(cue)
        self._cues.insert(self._index_of(cue_id) + 1, cue)
        return cue

    def delete(self, cue_id: str) -> Cue:
        return self._cues.pop(self._index_of(cue_id))

    def update_text(self, cue_id: str, text: str) -> Cue:
        cue = self.get(cue_id)
        cue.text = text.strip()
        return cue

    def update_timing(self, cue_id: str, start_time: str, end_time: str) -> Cue:
        cue = self.get(cue_id)
        cue.start_time = start_time
        cue.end_time = end_time
        return cue

    def replace_all(self, cues: List[Cue]) -> None:
        """Discards the current track, e.g. when a new transcript was generated."""
        self._cues = list(cues)


class ParseEventKind(Enum):
    CUE_EMITTED = "cue_emitted"
    LINE_SKIPPED = "line_skipped"

@dataclass
class ParseEvent:
    """What the cue parser did with one block or line of input."""
    kind: ParseEventKind
    line_number: int # 1-based line in the source document
    reason: Optional[str] = None
    cue: Optional[Cue] = None


VIDEO_DIMENSIONS = {
    '480p': (854, 480),
    '720p': (1280, 720),
    '1080p': (1920, 1080),
}
DEFAULT_DIMENSION = '720p'

@dataclass
class SubtitleStyle:
    """
    Styling handed to the encoder when burning subtitles.

    position: 1 = left, 2 = centre, 3 = right.
    outline: outline strength 0-5 (0 disables the outline).
    font_size: font size in pixels.
    """
    position: int = 2
    outline: int = 3
    font_size: int = 24

    def validate(self) -> "SubtitleStyle":
        if self.position not in (1, 2, 3):
            raise ConfigurationError(f"Subtitle position must be 1, 2 or 3, got {self.position}")
        if not 0 <= self.outline <= 5:
            raise ConfigurationError(f"Subtitle outline must be between 0 and 5, got {self.outline}")
        if self.font_size <= 0:
            raise ConfigurationError(f"Subtitle font size must be positive, got {self.font_size}")
        return self
