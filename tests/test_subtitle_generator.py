import os
from unittest.mock import MagicMock

import pytest

from subburn import subtitle_generator
from subburn.exceptions import FileSystemError, SubBurnError, VideoRenderError
from subburn.models import SubtitleStyle, TranscriptionResult, TranscriptSegment
from subburn.subtitle_generator import SubtitleGenerator, style_from_config


@pytest.fixture
def config(tmp_path):
    return {
        "uploads_dir": str(tmp_path / "uploads"),
        "outputs_dir": str(tmp_path / "outputs"),
        "subtitle_position": 2,
        "subtitle_outline": 3,
        "subtitle_size": 24,
    }


@pytest.fixture
def transcriber():
    mock = MagicMock()
    mock.transcribe.return_value = TranscriptionResult(
        language="en",
        segments=[TranscriptSegment(0.0, 2.0, "Hello world."), TranscriptSegment(None, 3.0, "lost")],
        full_text="Hello world. lost",
    )
    return mock


@pytest.fixture
def generator(config, transcriber):
    return SubtitleGenerator(
        config=config,
        transcriber=transcriber,
        audio_extractor=MagicMock(),
        video_renderer=MagicMock(),
    )


@pytest.fixture
def audio(tmp_path):
    path = tmp_path / "talk.mp3"
    path.write_bytes(b"ID3")
    return str(path)


def test_audio_mode_writes_subtitles_and_renders(generator, audio, config):
    result = generator.generate(audio, job_id="job1")

    subtitles_path = os.path.join(config["uploads_dir"], "job1", "subtitles.vtt")
    output_path = os.path.join(config["outputs_dir"], "job1", "output.mp4")
    assert result.subtitles_path == subtitles_path
    assert result.video_path == output_path
    assert result.cue_count == 1
    assert len(result.warnings) == 1
    with open(subtitles_path, encoding="utf-8") as f:
        assert f.read() == "WEBVTT\n\n1\n00:00:00.000 --> 00:00:02.000\nHello world.\n\n"
    generator.video_renderer.render_audio.assert_called_once_with(
        audio, subtitles_path, output_path, image_path=None, dimension="720p", style=SubtitleStyle()
    )
    generator.audio_extractor.extract_audio.assert_not_called()


def test_video_mode_extracts_audio_first(generator, tmp_path, config):
    video = tmp_path / "clip.mp4"
    video.write_bytes(b"\x00")
    extracted = os.path.join(config["uploads_dir"], "job2", "extracted_audio.wav")
    generator.audio_extractor.extract_audio.return_value = extracted

    result = generator.generate(str(video), mode="video", job_id="job2")

    generator.audio_extractor.extract_audio.assert_called_once_with(
        str(video), os.path.join(config["uploads_dir"], "job2")
    )
    generator.transcriber.transcribe.assert_called_once_with(extracted)
    generator.video_renderer.render_video.assert_called_once_with(
        str(video), result.subtitles_path, result.video_path, style=SubtitleStyle()
    )


def test_render_failure_cleans_up_job_dirs(generator, audio, config):
    generator.video_renderer.render_audio.side_effect = VideoRenderError("boom", stderr="bad")
    with pytest.raises(VideoRenderError):
        generator.generate(audio, job_id="job3")
    assert not os.path.exists(os.path.join(config["uploads_dir"], "job3"))
    assert not os.path.exists(os.path.join(config["outputs_dir"], "job3"))


def test_unexpected_error_is_wrapped(generator, audio, config):
    generator.transcriber.transcribe.side_effect = RuntimeError("network down")
    with pytest.raises(SubBurnError, match="network down"):
        generator.generate(audio, job_id="job4")
    assert not os.path.exists(os.path.join(config["uploads_dir"], "job4"))


def test_audio_size_limit(generator, audio, monkeypatch):
    monkeypatch.setattr(subtitle_generator, "MAX_AUDIO_BYTES", 1)
    with pytest.raises(FileSystemError, match="too large"):
        generator.generate(audio)
    generator.transcriber.transcribe.assert_not_called()


def test_image_must_be_supported_type(generator, audio, tmp_path):
    image = tmp_path / "cover.bmp"
    image.write_bytes(b"BM")
    with pytest.raises(FileSystemError, match="Invalid image format"):
        generator.generate(audio, image_path=str(image))


def test_missing_media(generator, tmp_path):
    with pytest.raises(FileNotFoundError):
        generator.generate(str(tmp_path / "nothing.mp3"))


def test_unknown_mode(generator, audio):
    with pytest.raises(SubBurnError):
        generator.generate(audio, mode="karaoke")


def test_missing_directories_in_config(transcriber):
    with pytest.raises(SubBurnError):
        SubtitleGenerator({}, transcriber, MagicMock(), MagicMock())


def test_style_from_config_validates(config):
    config["subtitle_outline"] = 9
    with pytest.raises(SubBurnError):
        style_from_config(config)
