"""Chapter strategy - one segment per chapter marker reported by the source."""

from ripit.models import MediaItem, Segment, SplitConfig, StrategyAttempt, format_seconds
from ripit.strategies import register_strategy
from ripit.strategies.base import SegmentStrategy
from ripit.text_utils import sanitize_filename


@register_strategy("chapters")
class ChapterStrategy(SegmentStrategy):
    """Split on embedded chapter markers."""

    @property
    def name(self) -> str:
        return "Chapters"

    def derive(self, item: MediaItem, config: SplitConfig) -> StrategyAttempt:
        attempt = StrategyAttempt(method=self.name)
        if not item.chapters:
            attempt.reason = "nessun capitolo nei metadati"
            return attempt

        for i, chapter in enumerate(item.chapters, 1):
            start = chapter.start_seconds
            end = chapter.end_seconds
            if end is not None and not end > start:
                # Dropping the chapter would fuse it into its neighbour
                attempt.notes.append(
                    f"Capitolo {i}: fine ({format_seconds(end)}) non successiva "
                    f"all'inizio ({format_seconds(start)}), uso EOF"
                )
                end = None

            raw_title = chapter.title or f"Chapter_{i}"
            title = sanitize_filename(raw_title) or f"chapter_{i}"
            attempt.segments.append(Segment(index=i, start=start, end=end, title=title))

        attempt.reason = f"{len(attempt.segments)} capitoli"
        return attempt
