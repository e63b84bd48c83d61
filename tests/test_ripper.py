"""Tests for the ripper orchestrator."""

from unittest.mock import MagicMock, patch

import pytest

from ripit.download import MetadataError
from ripit.models import (
    ChapterMark, DownloadStatus, MediaInfo, RipConfig, RipStatus, SplitResult,
)
from ripit.ripper import Ripper


def _client(tmp_path, info, status=DownloadStatus.DOWNLOADED, create_file=True):
    client = MagicMock()
    client.probe_playlist.return_value = None
    client.fetch_info.return_value = info

    def download_audio(url, output_dir, stem, temp_dir=None):
        assert temp_dir is not None and temp_dir.is_dir()
        if create_file:
            (output_dir / f"{stem}.mp3").write_bytes(b"audio")
        return status

    client.download_audio.side_effect = download_audio
    return client


@pytest.fixture
def config(tmp_path):
    return RipConfig(base_dir=tmp_path / "library")


CHAPTERED = MediaInfo(
    id="abc123",
    title="Live: at the Hall",
    description="",
    chapters=(ChapterMark(0, 90, "Intro"), ChapterMark(90, None, "Outro")),
)


class TestRipper:
    def test_chapters_are_split_into_title_directory(self, tmp_path, config):
        """Test a chaptered video is split inside its title directory."""
        client = _client(tmp_path, CHAPTERED)

        with patch("ripit.ripper.split_segments", return_value=SplitResult(succeeded=2)) as split:
            result = Ripper(config, client=client).rip("https://youtu.be/abc123")

        assert result.status is RipStatus.SUCCESS
        assert result.method == "Chapters"
        assert result.output_dir == config.base_dir / "Live_at_the_Hall"
        assert [s.title for s in result.segments] == ["Intro", "Outro"]
        assert config.archive_file.exists()

        segments, source = split.call_args.args
        assert source == config.base_dir / "Live_at_the_Hall" / "Live_at_the_Hall.mp3"
        assert split.call_args.kwargs["album"] == "Live: at the Hall"
        assert len(segments) == 2

    def test_partial_failure_reported(self, tmp_path, config):
        """Test failed tracks give a PARTIAL result."""
        client = _client(tmp_path, CHAPTERED)

        with patch("ripit.ripper.split_segments", return_value=SplitResult(succeeded=1, failed=1)):
            result = Ripper(config, client=client).rip("abc123")

        assert result.status is RipStatus.PARTIAL
        assert "1 tracce fallite" in result.message

    def test_no_segments_keeps_file_and_never_splits(self, tmp_path, config):
        """Test the whole file is kept when no strategy finds segments."""
        info = MediaInfo(id="x", title="Ambient", description="no timestamps here")
        client = _client(tmp_path, info)

        with (
            patch("ripit.strategies.silence.detect_silence", return_value=[]),
            patch("ripit.ripper.split_segments") as split,
        ):
            result = Ripper(config, client=client).rip("x")

        split.assert_not_called()
        assert result.status is RipStatus.SUCCESS
        assert result.method is None
        assert (config.base_dir / "Ambient" / "Ambient.mp3").exists()

    def test_metadata_failure_is_fatal(self, tmp_path, config):
        """Test missing metadata aborts before downloading."""
        client = _client(tmp_path, CHAPTERED)
        client.fetch_info.side_effect = MetadataError("niente titolo")

        result = Ripper(config, client=client).rip("x")

        assert result.status is RipStatus.FATAL
        assert "niente titolo" in result.message
        client.download_audio.assert_not_called()

    def test_missing_audio_is_fatal(self, tmp_path, config):
        """Test a failed download without a file is fatal."""
        client = _client(tmp_path, CHAPTERED, status=DownloadStatus.FAILED, create_file=False)

        with patch("ripit.ripper.split_segments") as split:
            result = Ripper(config, client=client).rip("x")

        assert result.status is RipStatus.FATAL
        split.assert_not_called()

    def test_already_present_uses_existing_file(self, tmp_path, config):
        """Test an archived video reuses the file on disk."""
        client = _client(tmp_path, CHAPTERED, status=DownloadStatus.ALREADY_PRESENT)

        with patch("ripit.ripper.split_segments", return_value=SplitResult(succeeded=2)) as split:
            result = Ripper(config, client=client).rip("x")

        assert result.status is RipStatus.SUCCESS
        split.assert_called_once()

    def test_already_present_without_file_is_fatal(self, tmp_path, config):
        """Test an archived video without its file is fatal."""
        client = _client(tmp_path, CHAPTERED, status=DownloadStatus.ALREADY_PRESENT, create_file=False)

        result = Ripper(config, client=client).rip("x")

        assert result.status is RipStatus.FATAL

    def test_finds_file_with_slightly_different_name(self, tmp_path, config):
        """Test the audio is found when yt-dlp altered the file name."""
        client = _client(tmp_path, CHAPTERED, create_file=False)
        output_dir = config.base_dir / "Live_at_the_Hall"

        def download_audio(url, out, stem, temp_dir=None):
            (out / f"{stem} (1).mp3").write_bytes(b"audio")
            return DownloadStatus.DOWNLOADED

        client.download_audio.side_effect = download_audio

        with patch("ripit.ripper.split_segments", return_value=SplitResult(succeeded=2)) as split:
            Ripper(config, client=client).rip("x")

        assert split.call_args.args[1] == output_dir / "Live_at_the_Hall (1).mp3"

    def test_thumbnails_removed(self, tmp_path, config):
        """Test leftover thumbnails are deleted."""
        client = _client(tmp_path, CHAPTERED)
        thumb = config.base_dir / "Live_at_the_Hall" / "Live_at_the_Hall.webp"

        def download_audio(url, out, stem, temp_dir=None):
            (out / f"{stem}.mp3").write_bytes(b"audio")
            thumb.write_bytes(b"img")
            return DownloadStatus.DOWNLOADED

        client.download_audio.side_effect = download_audio

        with patch("ripit.ripper.split_segments", return_value=SplitResult(succeeded=2)):
            Ripper(config, client=client).rip("x")

        assert not thumb.exists()

    def test_temp_dir_removed_on_interrupt(self, tmp_path, config):
        """Test the temporary directory is removed on interrupt."""
        client = _client(tmp_path, CHAPTERED)
        seen = {}

        def interrupted(url, output_dir, stem, temp_dir=None):
            seen["temp"] = temp_dir
            raise KeyboardInterrupt

        client.download_audio.side_effect = interrupted

        with pytest.raises(KeyboardInterrupt):
            Ripper(config, client=client).rip("x")

        assert not seen["temp"].exists()

    def test_playlist_is_downloaded_without_splitting(self, tmp_path, config):
        """Test playlists are saved one file per entry."""
        client = MagicMock()
        client.probe_playlist.return_value = "My Playlist"

        def download_playlist(url, output_dir, temp_dir=None):
            (output_dir / "01 - One.mp3").write_bytes(b"a")
            (output_dir / "02 - Two.mp3").write_bytes(b"b")
            return DownloadStatus.DOWNLOADED

        client.download_playlist.side_effect = download_playlist

        with patch("ripit.ripper.split_segments") as split:
            result = Ripper(config, client=client).rip("https://youtube.com/playlist?list=PL1")

        split.assert_not_called()
        client.fetch_info.assert_not_called()
        assert result.status is RipStatus.SUCCESS
        assert result.output_dir == config.base_dir / "My_Playlist"
        assert "2 tracce" in result.message

    def test_unusable_title_uses_id_directory(self, tmp_path, config):
        """Test a title that sanitizes to nothing lands in the same directory the collection checks."""
        info = MediaInfo(id="abc123", title="???", chapters=CHAPTERED.chapters)
        client = _client(tmp_path, info)

        with patch("ripit.ripper.split_segments", return_value=SplitResult(succeeded=2)) as split:
            result = Ripper(config, client=client).rip("abc123")

        assert result.output_dir == config.base_dir / "untitled_abc123"
        assert split.call_args.args[1] == config.base_dir / "untitled_abc123" / "untitled_abc123.mp3"
