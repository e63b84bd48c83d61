"""Segment derivation - choose how to partition a media file into tracks."""

from typing import Optional, Sequence

from ripit.models import Derivation, MediaItem, SplitConfig
from ripit.strategies import SegmentStrategy, get_strategy, list_strategies


def default_strategies(names: Optional[Sequence[str]] = None) -> list[SegmentStrategy]:
    """Instantiate the named strategies, or every registered one in priority order."""
    return [get_strategy(name) for name in (names or list_strategies())]


def derive_segments(
    item: MediaItem,
    config: Optional[SplitConfig] = None,
    strategies: Optional[Sequence[SegmentStrategy]] = None,
) -> Derivation:
    """Run the strategies in order and keep the first that yields segments.

    Later strategies are not attempted once one succeeds, so silence
    detection only runs when neither chapters nor a timestamped description
    are usable. An empty result means the file should be kept whole.
    """
    config = config or SplitConfig()
    if strategies is None:
        strategies = default_strategies()

    attempts = []
    for strategy in strategies:
        attempt = strategy.derive(item, config)
        attempts.append(attempt)
        if attempt.accepted:
            return Derivation(
                segments=attempt.segments,
                method=attempt.method,
                attempts=attempts,
            )

    return Derivation(segments=[], method=None, attempts=attempts)
