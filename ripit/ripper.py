"""Ripper - orchestrates the full download → derive segments → split pipeline."""

import glob
import logging
import shutil
import tempfile
from pathlib import Path
from typing import Callable, Optional

from ripit.audio.splitter import split_segments
from ripit.download import AUDIO_FORMAT, MediaClient, MetadataError
from ripit.models import (
    Derivation, DownloadStatus, MediaItem, RipConfig, RipResult, RipStatus,
    format_seconds,
)
from ripit.segments import derive_segments
from ripit.text_utils import directory_name

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int, str], None]


class AudioMissingError(RuntimeError):
    """The audio file to split is not on disk after the download step."""


class Ripper:
    """Downloads one video and splits it into tracks."""

    def __init__(self, config: RipConfig, client: Optional[MediaClient] = None):
        self.config = config
        self.client = client or MediaClient(
            archive_file=config.archive_file,
            retries=config.retries,
            timeout=config.split.timeout,
        )

    def rip(self, url: str, on_progress: Optional[ProgressCallback] = None) -> RipResult:
        """Full pipeline for one URL or video id.

        Fatal errors (no metadata, no audio file) are reported through the
        returned status rather than raised.

        Args:
            url: Video/playlist URL or id.
            on_progress: Callback(current, total, track_title) during splitting.
        """
        base_dir = self.config.base_dir
        base_dir.mkdir(parents=True, exist_ok=True)
        self.config.archive_file.touch(exist_ok=True)

        logger.info("Elaborazione URL: %s", url)
        logger.info("Archivio download: %s", self.config.archive_file)

        work_path = Path(tempfile.mkdtemp(prefix="ripit_"))
        logger.debug("Directory temporanea: %s", work_path)
        try:
            playlist_title = self.client.probe_playlist(url)
            if playlist_title:
                return self._rip_playlist(url, playlist_title, work_path)
            return self._rip_single(url, work_path, on_progress)
        except (MetadataError, AudioMissingError) as e:
            logger.error("%s", e)
            return RipResult(status=RipStatus.FATAL, message=str(e))
        finally:
            shutil.rmtree(work_path, ignore_errors=True)

    def _rip_single(
        self,
        url: str,
        work_path: Path,
        on_progress: Optional[ProgressCallback],
    ) -> RipResult:
        info = self.client.fetch_info(url)
        safe_title = directory_name(info.title, info.id)
        output_dir = self.config.base_dir / safe_title

        logger.info("Titolo: %s", info.title)
        logger.info("Nome sanificato: %s", safe_title)
        logger.info("Directory di output: %s", output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)

        audio_path = self._download(url, output_dir, safe_title, work_path)

        item = MediaItem(
            raw_title=info.title,
            description=info.description,
            chapters=info.chapters,
            audio_path=audio_path,
        )
        derivation = derive_segments(item, self.config.split)
        log_derivation(derivation)

        result = RipResult(
            status=RipStatus.SUCCESS,
            title=info.title,
            output_dir=output_dir,
            method=derivation.method,
            segments=derivation.segments,
        )

        if not derivation.segments:
            logger.info("Nessun segmento trovato, file originale conservato: %s", audio_path)
            result.message = f"File conservato intero: {audio_path}"
            _remove_thumbnails(output_dir)
            return result

        logger.info(
            "Divisione in %d tracce con metodo: %s",
            len(derivation.segments), derivation.method,
        )
        split = split_segments(
            derivation.segments,
            audio_path,
            album=info.title,
            output_dir=output_dir,
            config=self.config.split,
            on_progress=on_progress,
        )
        result.split = split
        _remove_thumbnails(output_dir)

        if split.ok:
            result.message = f"{split.succeeded} tracce create in {output_dir}"
        else:
            result.status = RipStatus.PARTIAL
            result.message = (
                f"{split.failed} tracce fallite, {split.succeeded} riuscite; "
                f"file originale conservato: {audio_path}"
            )
        return result

    def _rip_playlist(self, url: str, playlist_title: str, work_path: Path) -> RipResult:
        """Playlist inputs are downloaded one file per entry and never split."""
        output_dir = self.config.base_dir / directory_name(playlist_title)
        output_dir.mkdir(parents=True, exist_ok=True)
        logger.info("Playlist rilevata: %s", playlist_title)
        logger.info("Download delle singole tracce in: %s", output_dir)

        status = self.client.download_playlist(url, output_dir, temp_dir=work_path)
        count = len(list(output_dir.glob(f"*.{AUDIO_FORMAT}")))
        _remove_thumbnails(output_dir)

        if status is DownloadStatus.FAILED and count == 0:
            raise AudioMissingError(f"Download della playlist fallito, nessun file in {output_dir}")

        return RipResult(
            status=RipStatus.PARTIAL if status is DownloadStatus.FAILED else RipStatus.SUCCESS,
            title=playlist_title,
            output_dir=output_dir,
            message=f"{count} tracce salvate in {output_dir}",
        )

    def _download(self, url: str, output_dir: Path, stem: str, work_path: Path) -> Path:
        expected = output_dir / f"{stem}.{AUDIO_FORMAT}"
        status = self.client.download_audio(url, output_dir, stem, temp_dir=work_path)

        if status is DownloadStatus.ALREADY_PRESENT:
            logger.info("Video già nell'archivio, uso il file esistente se presente")
        elif status is DownloadStatus.FAILED:
            logger.warning("Download fallito, cerco un file esistente: %s", expected)

        if expected.exists():
            return expected

        # yt-dlp may have sanitized the name differently
        for candidate in sorted(output_dir.glob(f"{glob.escape(stem)}*.{AUDIO_FORMAT}")):
            logger.info("Trovato file con nome leggermente diverso: %s", candidate.name)
            return candidate

        raise AudioMissingError(f"File audio non trovato dopo il download: {expected}")


def log_derivation(derivation: Derivation) -> None:
    """Log which strategies were tried, why they were rejected and the chosen segments."""
    for attempt in derivation.attempts:
        for note in attempt.notes:
            logger.warning("%s: %s", attempt.method, note)
        if attempt.accepted:
            logger.info("Metodo scelto: %s (%s)", attempt.method, attempt.reason)
        else:
            logger.info("Metodo scartato: %s (%s)", attempt.method, attempt.reason)

    for segment in derivation.segments:
        logger.info(
            "  %03d  %s -> %s  %s",
            segment.index, format_seconds(segment.start), segment.end_label, segment.title,
        )


def _remove_thumbnails(output_dir: Path) -> None:
    """Remove thumbnail files yt-dlp may leave next to the audio."""
    for thumb in output_dir.glob("*.webp"):
        logger.debug("Rimozione miniatura: %s", thumb.name)
        thumb.unlink(missing_ok=True)
