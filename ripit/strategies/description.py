"""Description strategy - split on a `[HH:]MM:SS Title` tracklist in the description."""

import re

from ripit.models import (
    MediaItem, Segment, SplitConfig, StrategyAttempt, TimestampEntry, format_seconds,
)
from ripit.strategies import register_strategy
from ripit.strategies.base import SegmentStrategy
from ripit.text_utils import sanitize_filename, timestamp_to_seconds

TIMESTAMP_LINE_RE = re.compile(r"^\s*(?:(?P<hours>\d+):)?(?P<mmss>\d+:\d{2})\s+(?P<title>.+)$")
_TRAILING_DASH_RE = re.compile(r"\s*[-–—]\s*$")


def parse_timestamp_lines(description: str) -> list[TimestampEntry]:
    """Return the timestamped lines of a description in the order they appear."""
    entries = []
    for line in description.splitlines():
        match = TIMESTAMP_LINE_RE.match(line)
        if not match:
            continue

        timestamp = match.group("mmss")
        if match.group("hours"):
            timestamp = f"{match.group('hours')}:{timestamp}"

        title = _TRAILING_DASH_RE.sub("", match.group("title")).rstrip()
        entries.append(TimestampEntry(
            seconds=timestamp_to_seconds(timestamp),
            title=sanitize_filename(title) or "track",
        ))
    return entries


@register_strategy("description")
class DescriptionStrategy(SegmentStrategy):
    """Split on timestamps listed in the description."""

    @property
    def name(self) -> str:
        return "Timestamped Description"

    def derive(self, item: MediaItem, config: SplitConfig) -> StrategyAttempt:
        attempt = StrategyAttempt(method=self.name)
        if not item.description:
            attempt.reason = "descrizione vuota"
            return attempt

        entries = parse_timestamp_lines(item.description)
        if len(entries) < 2:
            # One timestamp cannot bound an interval
            attempt.reason = f"trovati {len(entries)} timestamp, ne servono almeno 2"
            return attempt

        # sorted() is stable, so equal timestamps keep description order
        entries = sorted(entries, key=lambda e: e.seconds)
        for i, entry in enumerate(entries):
            end = None
            if i < len(entries) - 1:
                next_start = entries[i + 1].seconds
                if next_start > entry.seconds:
                    end = next_start
                else:
                    attempt.notes.append(
                        f"Traccia {i + 1}: fine ({format_seconds(next_start)}) non successiva "
                        f"all'inizio ({format_seconds(entry.seconds)}), uso EOF"
                    )
            attempt.segments.append(Segment(
                index=i + 1, start=entry.seconds, end=end, title=entry.title,
            ))

        attempt.reason = f"{len(entries)} timestamp nella descrizione"
        return attempt
