"""Orchestrates the upload -> transcript -> subtitles -> burned video pipeline."""

import logging
import os
import shutil
import time
import uuid
from dataclasses import dataclass, field
from typing import List, Optional

from .audio_extractor import AudioExtractor
from .transcriber import Transcriber
from .video_renderer import VideoRenderer
from .segmenter import CueSegmenter
from .subtitle_formatter import VTTFormatter
from .models import DEFAULT_DIMENSION, SubtitleStyle
from .exceptions import SubBurnError, FileSystemError
from .utils import ensure_dir_exists

logger = logging.getLogger(__name__)

MB = 1024 * 1024
MAX_AUDIO_BYTES = 50 * MB
MAX_VIDEO_BYTES = 100 * MB
MAX_IMAGE_BYTES = 10 * MB
IMAGE_EXTENSIONS = ('.jpg', '.jpeg', '.png', '.gif', '.webp')

MODE_AUDIO = 'audio'
MODE_VIDEO = 'video'

SUBTITLES_FILENAME = 'subtitles.vtt'
OUTPUT_FILENAME = 'output.mp4'


@dataclass
class GenerationResult:
    """Where one job's artifacts ended up."""
    job_id: str
    video_path: str
    subtitles_path: str
    cue_count: int
    warnings: List[str] = field(default_factory=list)


def style_from_config(config: dict) -> SubtitleStyle:
    return SubtitleStyle(
        position=int(config.get('subtitle_position', 2)),
        outline=int(config.get('subtitle_outline', 3)),
        font_size=int(config.get('subtitle_size', 24)),
    ).validate()


def check_file_size(path: str, limit: int, kind: str) -> None:
    """
    Raises:
        FileNotFoundError: If ``path`` does not exist.
        FileSystemError: If the file is larger than ``limit`` bytes.
    """
    if not os.path.isfile(path):
        raise FileNotFoundError(f"{kind.capitalize()} file not found: {path}")
    size = os.path.getsize(path)
    if size > limit:
        raise FileSystemError(f"{kind.capitalize()} file is too large ({size} bytes). Maximum size is {limit // MB}MB.")


def validate_image_file(path: str) -> None:
    check_file_size(path, MAX_IMAGE_BYTES, 'image')
    if os.path.splitext(path)[1].lower() not in IMAGE_EXTENSIONS:
        raise FileSystemError("Invalid image format. Please use JPG, PNG, GIF, or WebP images.")


class SubtitleGenerator:
    """
    Manages the end-to-end process for one uploaded media file.

    Each job gets its own upload and output directory named after a fresh
    job id. If any step fails both directories are removed again.
    """

    def __init__(
        self,
        config: dict,
        transcriber: Transcriber,
        audio_extractor: AudioExtractor,
        video_renderer: VideoRenderer,
        segmenter: Optional[CueSegmenter] = None,
    ):
        """
        Args:
            config: Merged configuration (see config_loader.DEFAULT_CONFIG).
            transcriber: Speech-to-text backend.
            audio_extractor: Used in video mode to get the audio track.
            video_renderer: Burns the subtitles into the final video.
            segmenter: Cue segmenter; a default one is created if omitted.
        """
        self.config = config
        self.transcriber = transcriber
        self.audio_extractor = audio_extractor
        self.video_renderer = video_renderer
        self.segmenter = segmenter or CueSegmenter()
        self.formatter = VTTFormatter()

        self.uploads_dir = config.get('uploads_dir')
        self.outputs_dir = config.get('outputs_dir')
        if not self.uploads_dir or not self.outputs_dir:
            raise SubBurnError("Configuration missing 'uploads_dir' or 'outputs_dir'.")

    def _job_paths(self, job_id: str):
        return os.path.join(self.uploads_dir, job_id), os.path.join(self.outputs_dir, job_id)

    def _cleanup_dirs(self, *dir_paths: str) -> None:
        for dir_path in dir_paths:
            if dir_path and os.path.exists(dir_path):
                try:
                    shutil.rmtree(dir_path)
                    logger.info(f"Cleaned up job directory: {dir_path}")
                except OSError as e:
                    logger.warning(f"Could not remove job directory {dir_path}: {e}")

    def write_subtitles(self, audio_path: str, subtitles_path: str):
        """Transcribes ``audio_path`` and writes the segmented cues as WebVTT. Returns (cue count, warnings)."""
        transcription = self.transcriber.transcribe(audio_path)
        document = self.segmenter.segment(transcription.segments, transcription.full_text)
        warnings = list(self.segmenter.warnings)
        if warnings:
            logger.warning(f"Segmenter reported {len(warnings)} issue(s) for {audio_path}.")
        if not len(document):
            logger.warning(f"Transcription of {audio_path} produced no cues; the video will have no subtitles.")
        self.formatter.write(document.cues, subtitles_path)
        return len(document), warnings

    def generate(
        self,
        media_path: str,
        mode: str = MODE_AUDIO,
        image_path: Optional[str] = None,
        dimension: str = DEFAULT_DIMENSION,
        style: Optional[SubtitleStyle] = None,
        job_id: Optional[str] = None,
    ) -> GenerationResult:
        """
        Runs the full pipeline for a single media file.

        Args:
            media_path: Audio file (audio mode) or video file (video mode).
            mode: 'audio' renders over an image or black canvas; 'video'
                  burns subtitles into the uploaded video itself.
            image_path: Optional background image for audio mode.
            dimension: Output raster preset for audio mode.
            style: Subtitle styling; taken from config when omitted.
            job_id: Directory name for this job; a uuid4 is used when omitted.

        Returns:
            A GenerationResult with the rendered video and subtitle paths.

        Raises:
            SubBurnError: For any configuration or processing errors in the pipeline.
            FileNotFoundError: If an input file is missing.
        """
        if mode not in (MODE_AUDIO, MODE_VIDEO):
            raise SubBurnError(f"Unsupported mode '{mode}'. Use '{MODE_AUDIO}' or '{MODE_VIDEO}'.")
        style = style or style_from_config(self.config)
        job_id = job_id or uuid.uuid4().hex
        upload_dir, output_dir = self._job_paths(job_id)

        start_time = time.time()
        logger.info(f"--- Starting job {job_id} ({mode} mode) for: {media_path} ---")
        try:
            if mode == MODE_AUDIO:
                check_file_size(media_path, MAX_AUDIO_BYTES, 'audio')
                if image_path:
                    validate_image_file(image_path)
            else:
                check_file_size(media_path, MAX_VIDEO_BYTES, 'video')

            ensure_dir_exists(upload_dir)
            ensure_dir_exists(output_dir)
            subtitles_path = os.path.join(upload_dir, SUBTITLES_FILENAME)
            output_path = os.path.join(output_dir, OUTPUT_FILENAME)

            if mode == MODE_AUDIO:
                logger.info("Step 1: Transcribing audio...")
                cue_count, warnings = self.write_subtitles(media_path, subtitles_path)
                logger.info("Step 2: Rendering video...")
                self.video_renderer.render_audio(media_path, subtitles_path, output_path,
                                                 image_path=image_path, dimension=dimension, style=style)
            else:
                logger.info("Step 1: Extracting audio...")
                audio_path = self.audio_extractor.extract_audio(media_path, upload_dir)
                logger.info("Step 2: Transcribing audio...")
                cue_count, warnings = self.write_subtitles(audio_path, subtitles_path)
                logger.info("Step 3: Burning subtitles into video...")
                self.video_renderer.render_video(media_path, subtitles_path, output_path, style=style)

            logger.info(f"--- Job {job_id} completed in {time.time() - start_time:.2f} seconds ---")
            return GenerationResult(job_id=job_id, video_path=output_path, subtitles_path=subtitles_path,
                                    cue_count=cue_count, warnings=warnings)

        except (SubBurnError, FileNotFoundError) as e:
            logger.error(f"Job {job_id} failed: {e}")
            self._cleanup_dirs(upload_dir, output_dir)
            raise
        except Exception as e:
            logger.critical(f"An unexpected critical error occurred during job {job_id}: {e}", exc_info=True)
            self._cleanup_dirs(upload_dir, output_dir)
            raise SubBurnError(f"An unexpected critical error occurred: {e}") from e
