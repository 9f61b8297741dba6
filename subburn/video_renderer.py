"""Burns WebVTT subtitles into video frames using ffmpeg."""

import ffmpeg
import logging
import os
from typing import Optional

from .exceptions import VideoRenderError
from .models import DEFAULT_DIMENSION, VIDEO_DIMENSIONS, SubtitleStyle
from .utils import ensure_dir_exists

logger = logging.getLogger(__name__)

FONT_NAME = "Noto Sans"
AUDIO_BITRATE = "192k"

def build_force_style(style: SubtitleStyle) -> str:
    """
    Builds the libass ``force_style`` override for the subtitles filter.

    Only the four user-facing knobs vary; the outline entry is left out
    entirely when the outline strength is 0.
    """
    parts = [
        f"FontName={FONT_NAME}",
        f"FontSize={style.font_size}",
        f"Alignment={style.position}",
        "OutlineColour=&H80000000", # semi-transparent black
        "BorderStyle=3",
        f"Outline={style.outline}" if style.outline > 0 else "",
        "Shadow=0",
        "MarginV=20",
    ]
    return ",".join(p for p in parts if p)

def resolve_dimension(dimension: Optional[str]):
    """Returns (width, height) for a preset name, falling back to 720p for unknown names."""
    if dimension not in VIDEO_DIMENSIONS:
        logger.warning(f"Unknown video dimension '{dimension}', using {DEFAULT_DIMENSION}.")
        dimension = DEFAULT_DIMENSION
    return VIDEO_DIMENSIONS[dimension]


class VideoRenderer:
    """Produces the final MP4 with subtitles burned in."""

    def __init__(self, ffmpeg_path: Optional[str] = None):
        self.ffmpeg_cmd = ffmpeg_path or 'ffmpeg'
        logger.info(f"Using ffmpeg command for rendering: {self.ffmpeg_cmd}")

    def _run(self, stream, output_path: str) -> str:
        logger.debug(f"ffmpeg args: {' '.join(stream.get_args())}")
        try:
            stream.overwrite_output().run(cmd=self.ffmpeg_cmd, capture_stdout=True, capture_stderr=True)
        except ffmpeg.Error as e:
            stderr_output = e.stderr.decode('utf-8', errors='replace') if e.stderr else "No stderr output"
            logger.error(f"ffmpeg failed while rendering {output_path}: {stderr_output}")
            raise VideoRenderError(f"ffmpeg failed to render {output_path}", stderr=stderr_output) from e
        except OSError as e:
            logger.error(f"Could not start ffmpeg ({self.ffmpeg_cmd}): {e}", exc_info=True)
            raise VideoRenderError(f"Could not start ffmpeg: {e}") from e
        logger.info(f"Rendered video: {output_path}")
        return output_path

    def build_audio_stream(
        self,
        audio_path: str,
        subtitles_path: str,
        output_path: str,
        image_path: Optional[str] = None,
        dimension: str = DEFAULT_DIMENSION,
        style: Optional[SubtitleStyle] = None,
    ):
        """Builds the ffmpeg graph for audio input over a still image or a black canvas."""
        style = (style or SubtitleStyle()).validate()
        width, height = resolve_dimension(dimension)
        subtitles = os.path.abspath(subtitles_path)
        audio = ffmpeg.input(audio_path)

        if image_path:
            # Fit the image inside the canvas and pad the rest with black
            video = (
                ffmpeg
                .input(image_path, loop=1)
                .filter('scale', width, height, force_original_aspect_ratio='decrease')
                .filter('pad', width, height, '(ow-iw)/2', '(oh-ih)/2', color='black')
            )
            extra = {'tune': 'stillimage'}
        else:
            video = ffmpeg.input(f"color=c=black:s={width}x{height}:r=25", f='lavfi')
            extra = {}

        video = video.filter('subtitles', subtitles, force_style=build_force_style(style))
        return ffmpeg.output(
            video, audio, output_path,
            vcodec='libx264', acodec='aac', audio_bitrate=AUDIO_BITRATE,
            pix_fmt='yuv420p', shortest=None, **extra
        )

    def render_audio(
        self,
        audio_path: str,
        subtitles_path: str,
        output_path: str,
        image_path: Optional[str] = None,
        dimension: str = DEFAULT_DIMENSION,
        style: Optional[SubtitleStyle] = None,
    ) -> str:
        """
        Renders an audio file into a subtitled video.

        Args:
            audio_path: Narration/music track.
            subtitles_path: WebVTT file to burn in.
            output_path: Destination MP4.
            image_path: Optional background image; a black canvas is used otherwise.
            dimension: One of 480p, 720p, 1080p.
            style: Subtitle styling.

        Returns:
            ``output_path``.

        Raises:
            VideoRenderError: If ffmpeg exits with an error.
        """
        logger.info(f"Rendering audio {audio_path} with subtitles {subtitles_path} ({dimension})")
        ensure_dir_exists(os.path.dirname(os.path.abspath(output_path)))
        stream = self.build_audio_stream(audio_path, subtitles_path, output_path, image_path, dimension, style)
        return self._run(stream, output_path)

    def build_video_stream(self, video_path: str, subtitles_path: str, output_path: str,
                           style: Optional[SubtitleStyle] = None):
        style = (style or SubtitleStyle()).validate()
        source = ffmpeg.input(video_path)
        video = source.video.filter('subtitles', os.path.abspath(subtitles_path), force_style=build_force_style(style))
        return ffmpeg.output(video, source.audio, output_path, vcodec='libx264', preset='medium', acodec='copy')

    def render_video(self, video_path: str, subtitles_path: str, output_path: str,
                     style: Optional[SubtitleStyle] = None) -> str:
        """Re-encodes ``video_path`` with the subtitles burned in; the audio track is copied."""
        logger.info(f"Burning subtitles {subtitles_path} into video {video_path}")
        ensure_dir_exists(os.path.dirname(os.path.abspath(output_path)))
        stream = self.build_video_stream(video_path, subtitles_path, output_path, style)
        return self._run(stream, output_path)
