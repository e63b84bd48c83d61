"""Text helpers - filename sanitization, timestamp parsing and description mining."""

import logging
import re
from typing import Iterator

logger = logging.getLogger(__name__)

_FORBIDDEN_RE = re.compile(r"[\\/:*?\"<>|$']+")
_WHITESPACE_RE = re.compile(r"\s+")
_UNDERSCORES_RE = re.compile(r"__+")

# Lines in a description that are almost never track titles
_SKIP_TITLE_RE = re.compile(
    r"^track\s?list:?$"
    r"|^timestamps:?$"
    r"|^https?:"
    r"|^\s*[-–—=*#]+\s*$"
    r"|download link|free download|support the artist|follow me|credits|lyrics",
    re.IGNORECASE,
)
_LIST_MARKER_RE = re.compile(r"^\s*(?:[0-9]+[.)]?|[-–—*•])\s+")
_BARE_TIMESTAMP_RE = re.compile(r"^[0-9]+:[0-9]{2}(?::[0-9]{2})?")
_DIGITS_RE = re.compile(r"[0-9]+")


def sanitize_filename(text: str) -> str:
    """Map arbitrary text to a safe path component.

    The result must be reproducible across runs: the collection updater
    decides whether a video was already ripped by checking for a directory
    named after the sanitized title.
    """
    text = _FORBIDDEN_RE.sub("_", text)
    text = _WHITESPACE_RE.sub("_", text)
    text = _UNDERSCORES_RE.sub("_", text)
    if text.startswith("_"):
        text = text[1:]
    if text.endswith("_"):
        text = text[:-1]
    return text


def directory_name(title: str, video_id: str = "") -> str:
    """Library directory for a title, with an id-based fallback when nothing survives sanitizing."""
    name = sanitize_filename(title)
    if name:
        return name
    fallback = f"untitled_{video_id}" if video_id else "untitled"
    logger.warning("Titolo vuoto dopo la sanificazione ('%s'), uso '%s'", title, fallback)
    return fallback


def timestamp_to_seconds(text: str) -> float:
    """Convert ``[[HH:]MM:]SS[.ms]`` to seconds.

    Returns 0 (and logs a warning) when the text cannot be parsed.
    """
    text = text.strip()
    integer_part, dot, fraction = text.partition(".")
    parts = integer_part.split(":")

    if len(parts) > 3 or not all(_DIGITS_RE.fullmatch(p) for p in parts):
        logger.warning("Impossibile interpretare il timestamp '%s'", text)
        return 0
    if dot and fraction and not _DIGITS_RE.fullmatch(fraction):
        logger.warning("Parte frazionaria non valida nel timestamp '%s'", text)
        return 0

    seconds = 0
    for part in parts:
        # int() is always base 10, so "09" is nine
        seconds = seconds * 60 + int(part)

    if dot and fraction:
        return seconds + float(f"0.{fraction}")
    return seconds


def iter_description_titles(description: str) -> Iterator[str]:
    """Yield lines of a description that plausibly are track titles, in order.

    This is a best-effort heuristic; it is only trusted when the number of
    titles matches the number of tracks found by silence detection.
    """
    for line in description.splitlines():
        line = line.strip()
        if not line:
            continue
        if _SKIP_TITLE_RE.search(line):
            continue

        cleaned = _LIST_MARKER_RE.sub("", line, count=1)
        if cleaned != line:
            line = cleaned

        if len(line) < 3 or _BARE_TIMESTAMP_RE.match(line):
            continue
        yield line
