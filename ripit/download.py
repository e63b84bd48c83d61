"""Media client - metadata lookup and audio download through yt-dlp."""

import logging
from pathlib import Path
from typing import Optional

import yt_dlp
from yt_dlp.utils import DownloadError

from ripit.audio.audio_utils import get_ffmpeg
from ripit.models import ChapterMark, DownloadStatus, MediaInfo

logger = logging.getLogger(__name__)

AUDIO_FORMAT = "mp3"
PLAYLIST_TEMPLATE = "%(playlist_index)02d - %(title)s.%(ext)s"


class MetadataError(RuntimeError):
    """Video metadata (at least the title) could not be fetched."""


class MediaClient:
    """Thin wrapper over the yt-dlp Python API.

    Args:
        archive_file: yt-dlp download archive used to skip already ripped ids.
        retries: Transport retries passed to yt-dlp.
        timeout: Socket timeout in seconds, or None for yt-dlp's default.
    """

    def __init__(
        self,
        archive_file: Optional[Path] = None,
        retries: int = 30,
        timeout: Optional[float] = None,
    ):
        self.archive_file = archive_file
        self.retries = retries
        self.timeout = timeout

    def _params(self, **extra) -> dict:
        params = {
            "quiet": True,
            "no_warnings": True,
            "retries": self.retries,
        }
        if self.timeout:
            params["socket_timeout"] = self.timeout
        params.update(extra)
        return params

    def _download_params(self, outtmpl: str, temp_dir: Optional[Path], **extra) -> dict:
        params = self._params(
            format="bestaudio/best",
            outtmpl={"default": outtmpl},
            overwrites=False,
            nopart=True,
            writethumbnail=True,
            ffmpeg_location=get_ffmpeg(),
            postprocessors=[
                {
                    "key": "FFmpegExtractAudio",
                    "preferredcodec": AUDIO_FORMAT,
                    "preferredquality": "0",
                },
                {"key": "FFmpegMetadata", "add_metadata": True},
                {"key": "EmbedThumbnail"},
            ],
            **extra,
        )
        if self.archive_file:
            params["download_archive"] = str(self.archive_file)
        if temp_dir:
            params["paths"] = {"temp": str(temp_dir)}
        return params

    def probe_playlist(self, url: str) -> Optional[str]:
        """Return the playlist title if the URL lists more than one entry.

        Returns None for single videos, and when the check itself fails the
        URL is treated as a single video.
        """
        params = self._params(extract_flat="in_playlist", skip_download=True)
        try:
            with yt_dlp.YoutubeDL(params) as ydl:
                info = ydl.extract_info(url, download=False)
        except DownloadError as e:
            logger.warning(
                "Impossibile verificare se l'URL è una playlist, assumo video singolo: %s", e,
            )
            return None

        if not info or info.get("_type") != "playlist":
            return None
        entries = list(info.get("entries") or [])
        logger.debug("L'URL elenca %d elementi", len(entries))
        if len(entries) <= 1:
            return None
        return info.get("title") or info.get("playlist_title") or "untitled_playlist"

    def fetch_info(self, url: str) -> MediaInfo:
        """Fetch title, description and chapters of a single video.

        Raises:
            MetadataError: If yt-dlp fails or reports no title.
        """
        params = self._params(noplaylist=True, skip_download=True)
        try:
            with yt_dlp.YoutubeDL(params) as ydl:
                info = ydl.extract_info(url, download=False)
        except DownloadError as e:
            raise MetadataError(f"Impossibile recuperare i metadati di {url}: {e}") from e

        if not info or not info.get("title"):
            raise MetadataError(f"Nessun titolo disponibile per {url}")

        return MediaInfo(
            id=str(info.get("id") or ""),
            title=info["title"],
            description=info.get("description") or "",
            chapters=parse_chapters(info.get("chapters")),
        )

    def download_audio(
        self,
        url: str,
        output_dir: Path,
        stem: str,
        temp_dir: Optional[Path] = None,
    ) -> DownloadStatus:
        """Download the best audio stream of one video as ``<output_dir>/<stem>.mp3``."""
        outtmpl = str(output_dir / f"{stem}.%(ext)s")
        params = self._download_params(outtmpl, temp_dir, noplaylist=True)
        try:
            with yt_dlp.YoutubeDL(params) as ydl:
                info = ydl.extract_info(url, download=False)
                if self.archive_file and ydl.in_download_archive(info):
                    logger.info("Video già presente nell'archivio: %s", self.archive_file)
                    return DownloadStatus.ALREADY_PRESENT
                retcode = ydl.download([url])
        except DownloadError as e:
            logger.error("Download fallito: %s", e)
            return DownloadStatus.FAILED

        if retcode != 0:
            logger.error("yt-dlp ha terminato con codice %d", retcode)
            return DownloadStatus.FAILED
        return DownloadStatus.DOWNLOADED

    def download_playlist(
        self,
        url: str,
        output_dir: Path,
        temp_dir: Optional[Path] = None,
    ) -> DownloadStatus:
        """Download every entry of a playlist as its own file, without splitting."""
        outtmpl = str(output_dir / PLAYLIST_TEMPLATE)
        params = self._download_params(outtmpl, temp_dir, ignoreerrors=True)
        try:
            with yt_dlp.YoutubeDL(params) as ydl:
                retcode = ydl.download([url])
        except DownloadError as e:
            logger.error("Download della playlist fallito: %s", e)
            return DownloadStatus.FAILED
        return DownloadStatus.DOWNLOADED if retcode == 0 else DownloadStatus.FAILED

    def list_entries(self, url: str) -> list[dict]:
        """List the videos of a channel or playlist page without resolving each one.

        Raises:
            DownloadError: If yt-dlp cannot read the page.
        """
        params = self._params(extract_flat="in_playlist", skip_download=True)
        with yt_dlp.YoutubeDL(params) as ydl:
            info = ydl.extract_info(url, download=False)
        if not info:
            return []
        if info.get("_type") != "playlist":
            return [info]
        return [e for e in info.get("entries") or [] if e]


def parse_chapters(raw_chapters) -> tuple[ChapterMark, ...]:
    """Convert yt-dlp chapter dicts to ChapterMarks, skipping malformed entries."""
    chapters = []
    for i, raw in enumerate(raw_chapters or [], 1):
        if not isinstance(raw, dict):
            logger.warning("Capitolo %d ignorato: formato non valido (%r)", i, raw)
            continue

        try:
            start = float(raw.get("start_time") or 0)
        except (TypeError, ValueError):
            logger.warning(
                "Capitolo %d: inizio non valido (%r), uso 0", i, raw.get("start_time"),
            )
            start = 0.0

        end = raw.get("end_time")
        if end is not None:
            try:
                end = float(end)
            except (TypeError, ValueError):
                logger.warning("Capitolo %d: fine non valida (%r), uso EOF", i, end)
                end = None

        title = raw.get("title")
        chapters.append(ChapterMark(
            start_seconds=start,
            end_seconds=end,
            title=str(title) if title else None,
        ))
    return tuple(chapters)
