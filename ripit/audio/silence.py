"""Silence detection via ffmpeg's silencedetect filter."""

import logging
import re
import subprocess
from pathlib import Path
from typing import Optional

from ripit.audio.audio_utils import run_ffmpeg

logger = logging.getLogger(__name__)

_SILENCE_START_RE = re.compile(r"silence_start:\s*(?P<t>-?[0-9.]+(?:[eE][-+]?[0-9]+)?)")

# With "-f null -" ffmpeg may exit non-zero after a complete run, so the
# exit status alone does not mean the analysis failed.
_ERROR_MARKERS_RE = re.compile(r"Error|Invalid|Cannot|Could not|failed")


class SilenceDetectionError(RuntimeError):
    """ffmpeg could not analyse the file."""


def detect_silence(
    audio_path: Path,
    noise_db: int,
    min_duration: float,
    timeout: Optional[float] = None,
) -> list[float]:
    """Return the sorted onsets of silent intervals in an audio file.

    Args:
        audio_path: File to analyse.
        noise_db: Level (dB) below which audio counts as silence, e.g. -30.
        min_duration: Minimum silence length in seconds.
        timeout: Optional limit for the ffmpeg run, in seconds.

    Returns:
        Silence onsets in seconds, ascending. Empty when the analysis ran
        but found nothing.

    Raises:
        SilenceDetectionError: If ffmpeg could not run or reported an error.
    """
    filter_string = f"silencedetect=noise={noise_db}dB:duration={min_duration}"
    logger.info(
        "Rilevamento silenzi (soglia=%sdB, durata=%ss) su: %s",
        noise_db, min_duration, Path(audio_path).name,
    )

    try:
        result = run_ffmpeg(
            [
                "-hide_banner", "-nostats",
                "-i", str(audio_path),
                "-af", filter_string,
                "-f", "null", "-",
            ],
            check=False,
            timeout=timeout,
        )
    except subprocess.TimeoutExpired as e:
        raise SilenceDetectionError(
            f"Rilevamento silenzi interrotto dopo {timeout}s"
        ) from e
    except OSError as e:
        raise SilenceDetectionError(f"Impossibile eseguire ffmpeg: {e}") from e

    output = result.stderr or ""
    logger.debug("Output silencedetect:\n%s", output)

    if result.returncode != 0:
        if _ERROR_MARKERS_RE.search(output):
            raise SilenceDetectionError(
                f"ffmpeg ha fallito il rilevamento silenzi (codice {result.returncode})"
            )
        logger.debug(
            "ffmpeg è uscito con codice %d senza errori espliciti, analisi completata",
            result.returncode,
        )

    points = parse_silence_starts(output)
    if not points:
        logger.warning(
            "Nessun silenzio trovato con soglia=%sdB e durata=%ss",
            noise_db, min_duration,
        )
    return points


def parse_silence_starts(output: str) -> list[float]:
    """Extract the ``silence_start`` timestamps from silencedetect output."""
    points = []
    for line in output.splitlines():
        match = _SILENCE_START_RE.search(line)
        if not match:
            continue
        try:
            points.append(float(match.group("t")))
        except ValueError:
            logger.warning("Valore silence_start non valido: %s", line.strip())
    return sorted(points)
