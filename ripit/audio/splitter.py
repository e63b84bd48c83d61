"""Segment splitter - extracts each derived segment into its own tagged audio file."""

import logging
import subprocess
from pathlib import Path
from typing import Callable, Optional

from ripit.audio.audio_utils import run_ffmpeg
from ripit.models import Segment, SplitConfig, SplitResult, format_seconds

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int, str], None]


def output_path_for(segment: Segment, output_dir: Path, ext: str) -> Path:
    """Return ``<output_dir>/<ddd> - <title>.<ext>`` for a segment."""
    return output_dir / f"{segment.index:03d} - {segment.title}.{ext}"


def extract_segment(
    source: Path,
    output: Path,
    segment: Segment,
    album: str,
    timeout: Optional[float] = None,
) -> None:
    """Copy one segment of ``source`` into ``output`` with track/title/album tags.

    Raises:
        subprocess.CalledProcessError: If ffmpeg exits non-zero.
        subprocess.TimeoutExpired: If ffmpeg exceeds ``timeout``.
    """
    args = [
        "-hide_banner", "-loglevel", "error", "-y",
        "-i", str(source),
        "-ss", format_seconds(segment.start),
    ]
    if segment.end is not None:
        args += ["-to", format_seconds(segment.end)]
    args += [
        "-vn", "-acodec", "copy",
        "-metadata", f"track={segment.index}",
        "-metadata", f"title={segment.title}",
        "-metadata", f"album={album}",
        str(output),
    ]
    run_ffmpeg(args, timeout=timeout)


def split_segments(
    segments: list[Segment],
    source: Path,
    album: str,
    output_dir: Path,
    config: Optional[SplitConfig] = None,
    on_progress: Optional[ProgressCallback] = None,
) -> SplitResult:
    """Extract every segment, continuing past individual failures.

    The source file is deleted only when every segment succeeded; otherwise
    it is kept so the split can be retried.
    """
    config = config or SplitConfig()
    result = SplitResult()
    ext = source.suffix.lstrip(".") or "mp3"
    total = len(segments)

    for segment in segments:
        output = output_path_for(segment, output_dir, ext)
        logger.debug(
            "Traccia %d: inizio=%s, fine=%s, titolo='%s', output='%s'",
            segment.index, format_seconds(segment.start), segment.end_label,
            segment.title, output,
        )
        try:
            extract_segment(source, output, segment, album, timeout=config.timeout)
        except (subprocess.CalledProcessError, subprocess.TimeoutExpired, OSError) as e:
            result.failed += 1
            stderr = getattr(e, "stderr", None) or ""
            logger.error(
                "ffmpeg fallito per la traccia %d ('%s'): %s\n"
                "  Input: %s\n  Output: %s\n  Inizio: %s, Fine: %s%s",
                segment.index, segment.title, e, source, output,
                format_seconds(segment.start), segment.end_label,
                f"\n{stderr.strip()}" if stderr else "",
            )
        else:
            result.succeeded += 1
            result.outputs.append(output)

        if on_progress:
            on_progress(segment.index, total, segment.title)

    if result.ok:
        logger.info("Divisione completata: %d tracce create", result.succeeded)
        result.source_deleted = _remove_source(source)
    else:
        logger.error(
            "Divisione fallita per %d tracce su %d, file originale conservato: %s",
            result.failed, total, source,
        )
        if config.cleanup_partial:
            _remove_partial(result.outputs)

    return result


def _remove_source(source: Path) -> bool:
    logger.info("Rimozione file originale: %s", source.name)
    try:
        source.unlink()
    except OSError as e:
        logger.warning("Impossibile rimuovere il file originale '%s': %s", source, e)
        return False
    return True


def _remove_partial(outputs: list[Path]) -> None:
    """Delete the tracks written by a split that did not fully succeed."""
    logger.info("Rimozione delle tracce parziali...")
    for path in outputs:
        logger.debug("Rimozione traccia parziale: %s", path)
        path.unlink(missing_ok=True)
    outputs.clear()
