from unittest.mock import patch

import ffmpeg
import pytest

from subburn.audio_extractor import EXTRACTED_AUDIO_FILENAME, AudioExtractor
from subburn.exceptions import AudioExtractionError


@pytest.fixture
def video(tmp_path):
    path = tmp_path / "clip.mp4"
    path.write_bytes(b"not really a video")
    return path


def test_extract_audio_writes_into_job_dir(tmp_path, video):
    job_dir = tmp_path / "uploads" / "job1"
    with patch("ffmpeg.nodes.OutputStream.run") as run:
        result = AudioExtractor().extract_audio(str(video), str(job_dir))
    assert result == str(job_dir / EXTRACTED_AUDIO_FILENAME)
    assert job_dir.is_dir()
    assert run.call_args.kwargs["cmd"] == "ffmpeg"


def test_stream_keeps_mono_16k_pcm_audio_only(tmp_path, video):
    args = AudioExtractor().build_stream(str(video), str(tmp_path / "out.wav")).get_args()
    assert args[:2] == ["-i", str(video)]
    assert args[args.index("-acodec") + 1] == "pcm_s16le"
    assert args[args.index("-ar") + 1] == "16000"
    assert args[args.index("-ac") + 1] == "1"
    assert "-y" in args


def test_custom_ffmpeg_command(tmp_path, video):
    with patch("ffmpeg.nodes.OutputStream.run") as run:
        AudioExtractor(ffmpeg_path="/opt/ffmpeg").extract_audio(str(video), str(tmp_path))
    assert run.call_args.kwargs["cmd"] == "/opt/ffmpeg"


def test_missing_input(tmp_path):
    with pytest.raises(FileNotFoundError):
        AudioExtractor().extract_audio(str(tmp_path / "none.mp4"), str(tmp_path))


def test_ffmpeg_failure(tmp_path, video):
    error = ffmpeg.Error("ffmpeg", b"", b"Stream map 'a' matches no streams")
    with patch("ffmpeg.nodes.OutputStream.run", side_effect=error):
        with pytest.raises(AudioExtractionError, match="matches no streams"):
            AudioExtractor().extract_audio(str(video), str(tmp_path))


def test_ffmpeg_not_installed(tmp_path, video):
    with patch("ffmpeg.nodes.OutputStream.run", side_effect=FileNotFoundError("ffmpeg")):
        with pytest.raises(AudioExtractionError, match="Could not start ffmpeg"):
            AudioExtractor().extract_audio(str(video), str(tmp_path))
