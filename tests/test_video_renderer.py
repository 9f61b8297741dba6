from unittest.mock import patch

import ffmpeg
import pytest

from subburn.exceptions import VideoRenderError
from subburn.models import SubtitleStyle
from subburn.video_renderer import VideoRenderer, build_force_style, resolve_dimension


def test_force_style_defaults():
    assert build_force_style(SubtitleStyle()) == (
        "FontName=Noto Sans,FontSize=24,Alignment=2,OutlineColour=&H80000000,"
        "BorderStyle=3,Outline=3,Shadow=0,MarginV=20"
    )


def test_force_style_omits_zero_outline():
    style = build_force_style(SubtitleStyle(position=1, outline=0, font_size=30))
    assert "Outline=" not in style.replace("OutlineColour=", "")
    assert "Alignment=1" in style
    assert "FontSize=30" in style


def test_resolve_dimension():
    assert resolve_dimension("480p") == (854, 480)
    assert resolve_dimension("1080p") == (1920, 1080)
    assert resolve_dimension("4k") == (1280, 720)


def test_audio_over_black_canvas_args(tmp_path):
    args = VideoRenderer().build_audio_stream(
        "audio.mp3", "subs.vtt", str(tmp_path / "out.mp4"), dimension="1080p"
    ).get_args()
    assert "lavfi" in args
    assert "color=c=black:s=1920x1080:r=25" in args
    assert "-shortest" in args
    assert "libx264" in args and "aac" in args and "192k" in args
    assert "yuv420p" in args
    assert "stillimage" not in args
    graph = args[args.index("-filter_complex") + 1]
    assert "subtitles" in graph


def test_audio_over_image_args(tmp_path):
    args = VideoRenderer().build_audio_stream(
        "audio.mp3", "subs.vtt", str(tmp_path / "out.mp4"), image_path="cover.png", dimension="480p"
    ).get_args()
    assert "-loop" in args
    assert "cover.png" in args
    assert "stillimage" in args
    graph = args[args.index("-filter_complex") + 1]
    assert "scale" in graph and "pad" in graph and "subtitles" in graph


def test_video_args_copy_audio(tmp_path):
    args = VideoRenderer().build_video_stream("in.mp4", "subs.vtt", str(tmp_path / "out.mp4")).get_args()
    assert "in.mp4" in args
    assert "copy" in args
    assert "medium" in args


def test_render_audio_runs_ffmpeg(tmp_path):
    output = str(tmp_path / "jobs" / "out.mp4")
    with patch("ffmpeg.nodes.OutputStream.run") as run:
        assert VideoRenderer(ffmpeg_path="/opt/ffmpeg").render_audio("a.mp3", "s.vtt", output) == output
    assert run.call_args.kwargs["cmd"] == "/opt/ffmpeg"
    assert (tmp_path / "jobs").is_dir()


def test_render_failure_carries_stderr(tmp_path):
    error = ffmpeg.Error("ffmpeg", b"", b"Invalid subtitle file")
    with patch("ffmpeg.nodes.OutputStream.run", side_effect=error):
        with pytest.raises(VideoRenderError) as excinfo:
            VideoRenderer().render_video("in.mp4", "s.vtt", str(tmp_path / "out.mp4"))
    assert excinfo.value.stderr == "Invalid subtitle file"


def test_missing_ffmpeg_binary(tmp_path):
    with patch("ffmpeg.nodes.OutputStream.run", side_effect=FileNotFoundError("ffmpeg")):
        with pytest.raises(VideoRenderError):
            VideoRenderer().render_video("in.mp4", "s.vtt", str(tmp_path / "out.mp4"))
