"""Handles Speech-to-Text transcription using Whisper."""

import whisper
import logging
import math
import torch
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional
import os

from .models import TranscriptionResult, TranscriptSegment
from .exceptions import TranscriptionError

logger = logging.getLogger(__name__)

# Keeps "a.m."/"p.m." out of the transcript where possible; the segmenter cleans up the rest
DEFAULT_PROMPT = (
    'When transcribing, prefer using "am" and "pm" instead of "a.m." or "p.m.". '
    'Keep contractions and quotation marks intact.'
)

class Transcriber(ABC):
    """Abstract base class for transcription services."""

    @abstractmethod
    def transcribe(self, audio_path: str) -> TranscriptionResult:
        """
        Transcribes the given audio file.

        Args:
            audio_path: Path to the audio file.

        Returns:
            A TranscriptionResult object containing segments, full text and language.

        Raises:
            TranscriptionError: If transcription fails.
            FileNotFoundError: If the audio file doesn't exist.
        """
        pass


def _optional_float(value: Any) -> Optional[float]:
    if value is None:
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    # json.load accepts NaN and Infinity
    return number if math.isfinite(number) else None

def result_from_whisper(result: Dict[str, Any], audio_path: Optional[str] = None) -> TranscriptionResult:
    """
    Converts a Whisper-style response (``{"segments": [...], "text": ...}``) into a TranscriptionResult.

    Segments with missing fields are kept with ``None`` timing so the
    segmenter can account for them.
    """
    raw_segments = result.get('segments')
    if not isinstance(raw_segments, list):
        raw_segments = []
    segments = []
    for seg_data in raw_segments:
        if not isinstance(seg_data, dict):
            segments.append(TranscriptSegment(start_time=None, end_time=None, text=''))
            continue
        segments.append(
            TranscriptSegment(
                start_time=_optional_float(seg_data.get('start')),
                end_time=_optional_float(seg_data.get('end')),
                text=str(seg_data.get('text') or '').strip()
            )
        )
    if not segments:
        logger.warning("Transcription result did not contain any segments.")

    return TranscriptionResult(
        language=result.get('language'),
        segments=segments,
        full_text=str(result.get('text') or '').strip(),
        original_audio_path=audio_path
    )


class WhisperTranscriber(Transcriber):
    """Implements transcription using OpenAI's Whisper model."""

    def __init__(
        self,
        model_name: str = "medium",
        device: str = "cuda",
        fp16: bool = True,
        language: Optional[str] = None,
        initial_prompt: Optional[str] = DEFAULT_PROMPT,
    ):
        """
        Initializes the WhisperTranscriber.

        Args:
            model_name: The name of the Whisper model to use (e.g., "base", "medium.en").
            device: The device to run the model on ("cuda" or "cpu").
            fp16: Whether to use float16 precision (faster on compatible GPUs).
            language: Force a decoding language; None lets Whisper detect it.
            initial_prompt: Prompt text that nudges spelling and punctuation.

        Raises:
            ValueError: If the specified device is invalid.
            TranscriptionError: If the model fails to load.
        """
        self.model_name = model_name
        self.device = device
        self.fp16 = fp16
        self.language = language
        self.initial_prompt = initial_prompt

        if self.device == "cuda" and not torch.cuda.is_available():
            logger.warning("CUDA device requested but not available. Falling back to CPU.")
            self.device = "cpu"
        elif self.device not in ["cuda", "cpu"]:
            raise ValueError(f"Invalid device specified: {self.device}. Choose 'cuda' or 'cpu'.")

        logger.info(f"Initializing WhisperTranscriber with model '{self.model_name}' on device '{self.device}' (FP16: {self.fp16})")
        try:
            self.model = whisper.load_model(self.model_name, device=self.device)
            logger.info(f"Whisper model '{self.model_name}' loaded successfully.")
        except Exception as e:
            logger.error(f"Failed to load Whisper model '{self.model_name}': {e}", exc_info=True)
            raise TranscriptionError(f"Failed to load Whisper model '{self.model_name}': {e}") from e

    def transcribe(self, audio_path: str) -> TranscriptionResult:
        logger.info(f"Starting transcription for: {audio_path}")
        if not os.path.exists(audio_path):
            raise FileNotFoundError(f"Audio file not found: {audio_path}")

        try:
            result = self.model.transcribe(
                audio_path,
                language=self.language,
                initial_prompt=self.initial_prompt,
                fp16=self.fp16 if self.device == "cuda" else False, # FP16 only works on CUDA
                verbose=None
            )
        except Exception as e:
            logger.error(f"Error during Whisper transcription process for {audio_path}: {e}", exc_info=True)
            raise TranscriptionError(f"Failed to transcribe audio {audio_path}: {e}") from e

        logger.info(f"Transcription completed. Detected language: {result.get('language', 'N/A')}")
        transcription_result = result_from_whisper(result, audio_path)
        logger.info(f"Processed {len(transcription_result.segments)} segments from transcription.")
        return transcription_result
