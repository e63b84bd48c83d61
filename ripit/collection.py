"""Collection updater - keeps a local library in sync with tracked channels and playlists."""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

from yt_dlp.utils import DownloadError

from ripit.download import MediaClient
from ripit.models import RipResult, RipStatus
from ripit.text_utils import directory_name

logger = logging.getLogger(__name__)

DEFAULT_INDEX_FILE = Path.home() / ".yt_collection_index.txt"
VIDEO_URL = "https://www.youtube.com/watch?v={video_id}"

RipFunction = Callable[[str], RipResult]


@dataclass
class CollectionSummary:
    discovered: int = 0
    skipped: int = 0
    ripped: int = 0
    failed: int = 0


def read_index(index_path: Path) -> list[str]:
    """Return the tracked URLs, one per non-empty line."""
    if not index_path.exists():
        return []
    return [line.strip() for line in index_path.read_text().splitlines() if line.strip()]


def add_url(index_path: Path, url: str) -> bool:
    """Append a URL to the index. Returns False if it was already tracked."""
    if url in read_index(index_path):
        logger.warning("URL già presente nell'indice: %s", url)
        return False

    index_path.parent.mkdir(parents=True, exist_ok=True)
    with open(index_path, "a") as f:
        f.write(f"{url}\n")
    logger.info("URL aggiunto all'indice: %s", url)
    return True


def discover_videos(client: MediaClient, page_urls: list[str]) -> list[dict]:
    """List the videos of every tracked page, oldest upload first.

    Entries without an upload date keep their listing order after the dated ones.
    """
    videos = []
    for page_url in page_urls:
        logger.info("Recupero elenco video da: %s", page_url)
        try:
            entries = client.list_entries(page_url)
        except DownloadError as e:
            logger.error("Impossibile leggere %s: %s", page_url, e)
            continue

        for entry in entries:
            if not entry.get("id"):
                logger.warning("Elemento senza id ignorato in '%s': %r", page_url, entry)
                continue
            videos.append(entry)

    logger.info("Trovati %d video in totale", len(videos))
    return sorted(videos, key=lambda e: (e.get("upload_date") is None, e.get("upload_date") or ""))


def update_collection(
    index_path: Path,
    base_dir: Path,
    client: MediaClient,
    rip: RipFunction,
) -> CollectionSummary:
    """Rip every tracked video whose output directory does not exist yet.

    The existence check relies on ``directory_name`` producing the same
    directory name the ripper used.
    """
    summary = CollectionSummary()
    page_urls = read_index(index_path)
    if not page_urls:
        raise ValueError(
            f"Indice mancante o vuoto: {index_path}. Aggiungi un URL con --add."
        )

    logger.info("==== Inizio aggiornamento collezione ====")
    logger.info("Indice: %s (%d pagine)", index_path, len(page_urls))
    logger.info("Directory musica: %s", base_dir)

    videos = discover_videos(client, page_urls)
    summary.discovered = len(videos)

    for n, entry in enumerate(videos, 1):
        video_id = entry["id"]
        title = entry.get("title")
        if not title:
            logger.error("(%d/%d) Titolo non disponibile per %s, salto", n, summary.discovered, video_id)
            summary.failed += 1
            continue

        expected_dir = base_dir / directory_name(title, video_id)
        if expected_dir.is_dir():
            logger.info("(%d/%d) Già presente: '%s'", n, summary.discovered, title)
            summary.skipped += 1
            continue

        logger.info("(%d/%d) Nuovo video: '%s'", n, summary.discovered, title)
        result = rip(VIDEO_URL.format(video_id=video_id))
        if result.status is RipStatus.SUCCESS:
            summary.ripped += 1
        else:
            logger.error("Rip fallito per '%s' (%s): %s", title, video_id, result.message)
            summary.failed += 1

    logger.info("---- Riepilogo ----")
    logger.info("Video trovati: %d", summary.discovered)
    logger.info("Già presenti: %d", summary.skipped)
    logger.info("Scaricati: %d", summary.ripped)
    logger.info("Falliti: %d", summary.failed)
    logger.info("==== Aggiornamento collezione completato ====")
    return summary
