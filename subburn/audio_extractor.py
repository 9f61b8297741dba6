"""Pulls the speech track out of an uploaded video into its job directory."""

import ffmpeg
import os
import logging
from .exceptions import AudioExtractionError
from typing import Optional
from .utils import ensure_dir_exists

logger = logging.getLogger(__name__)

EXTRACTED_AUDIO_FILENAME = "extracted_audio.wav"
SAMPLE_RATE = 16000 # what Whisper resamples to anyway


class AudioExtractor:
    """Writes a mono 16 kHz WAV of a video's audio next to the job's other uploads."""

    def __init__(self, ffmpeg_path: Optional[str] = None):
        self.ffmpeg_cmd = ffmpeg_path or 'ffmpeg'
        logger.info(f"Using ffmpeg command for audio extraction: {self.ffmpeg_cmd}")

    def build_stream(self, video_path: str, audio_path: str):
        """Builds the ffmpeg graph that keeps only the audio stream as 16-bit PCM."""
        return (
            ffmpeg
            .input(video_path)
            .audio
            .output(audio_path, acodec='pcm_s16le', ar=SAMPLE_RATE, ac=1)
            .overwrite_output()
        )

    def extract_audio(self, video_path: str, job_upload_dir: str) -> str:
        """
        Extracts the audio of an uploaded video for transcription.

        Args:
            video_path: The uploaded video.
            job_upload_dir: The job's upload directory; the WAV is written there
                            as ``extracted_audio.wav`` and removed with the job.

        Returns:
            Path of the extracted WAV file.

        Raises:
            FileNotFoundError: If the video does not exist.
            AudioExtractionError: If ffmpeg fails, e.g. the video has no audio stream.
        """
        if not os.path.exists(video_path):
            raise FileNotFoundError(f"Input video file not found: {video_path}")
        ensure_dir_exists(job_upload_dir)
        audio_path = os.path.join(job_upload_dir, EXTRACTED_AUDIO_FILENAME)

        stream = self.build_stream(video_path, audio_path)
        logger.debug(f"ffmpeg args: {' '.join(stream.get_args())}")
        try:
            stream.run(cmd=self.ffmpeg_cmd, capture_stdout=True, capture_stderr=True)
        except ffmpeg.Error as e:
            stderr_output = e.stderr.decode('utf-8', errors='replace') if e.stderr else "No stderr output"
            logger.error(f"ffmpeg could not extract audio from {video_path}: {stderr_output}")
            raise AudioExtractionError(f"Failed to extract audio from {video_path}: {stderr_output}") from e
        except OSError as e:
            logger.error(f"Could not start ffmpeg ({self.ffmpeg_cmd}): {e}", exc_info=True)
            raise AudioExtractionError(f"Could not start ffmpeg: {e}") from e

        logger.info(f"Extracted audio to: {audio_path}")
        return audio_path
