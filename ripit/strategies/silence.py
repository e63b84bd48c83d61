"""Silence strategy - split on silent gaps, titled from the description when counts agree."""

from typing import Callable, Optional

from ripit.audio.silence import SilenceDetectionError, detect_silence
from ripit.models import MediaItem, Segment, SplitConfig, StrategyAttempt, format_seconds
from ripit.strategies import register_strategy
from ripit.strategies.base import SegmentStrategy
from ripit.text_utils import iter_description_titles, sanitize_filename

SilenceDetector = Callable[..., list[float]]

METHOD_WITH_TITLES = "Silence Detection with Description Titles"
METHOD_GENERIC = "Silence Detection with Generic Titles"


@register_strategy("silence")
class SilenceStrategy(SegmentStrategy):
    """Split on silence onsets detected in the audio."""

    def __init__(self, detector: Optional[SilenceDetector] = None):
        self.detector = detector

    @property
    def name(self) -> str:
        return "Silence Detection"

    def derive(self, item: MediaItem, config: SplitConfig) -> StrategyAttempt:
        attempt = StrategyAttempt(method=self.name)
        if item.audio_path is None:
            attempt.reason = "nessun file audio da analizzare"
            return attempt

        # Resolved at call time so tests can patch the module attribute
        detector = self.detector or detect_silence
        try:
            points = detector(
                item.audio_path,
                config.silence_db,
                config.silence_duration,
                timeout=config.timeout,
            )
        except SilenceDetectionError as e:
            attempt.reason = f"rilevamento silenzi fallito: {e}"
            attempt.notes.append(attempt.reason)
            return attempt

        if not points:
            attempt.reason = "nessun silenzio rilevato"
            return attempt

        expected = len(points) + 1
        titles = list(iter_description_titles(item.description))
        use_titles = len(titles) == expected
        if use_titles:
            attempt.method = METHOD_WITH_TITLES
            attempt.reason = (
                f"{len(points)} silenzi, {len(titles)} titoli nella descrizione corrispondono"
            )
        else:
            attempt.method = METHOD_GENERIC
            attempt.reason = (
                f"{len(points)} silenzi, {len(titles)} titoli nella descrizione "
                f"invece di {expected}: titoli generici"
            )

        for i in range(expected):
            start = points[i - 1] if i > 0 else 0.0
            end = points[i] if i < len(points) else None
            if end is not None and not end > start:
                attempt.notes.append(
                    f"Segmento {i + 1}: fine ({format_seconds(end)}) non successiva "
                    f"all'inizio ({format_seconds(start)}), saltato"
                )
                continue

            index = len(attempt.segments) + 1
            if use_titles:
                title = sanitize_filename(titles[i]) or f"track_{index}"
            else:
                title = f"Track_{index:03d}"
            attempt.segments.append(Segment(index=index, start=start, end=end, title=title))

        return attempt
