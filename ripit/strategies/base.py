"""Abstract base class for segment-derivation strategies."""

from abc import ABC, abstractmethod

from ripit.models import MediaItem, SplitConfig, StrategyAttempt


class SegmentStrategy(ABC):
    """A way of partitioning one audio file into titled segments."""

    @abstractmethod
    def derive(self, item: MediaItem, config: SplitConfig) -> StrategyAttempt:
        """Try to derive segments for a media item.

        Returns:
            The attempt; its ``segments`` list is empty when the strategy
            does not apply, with ``reason`` saying why.
        """
        ...

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable strategy name."""
        ...
