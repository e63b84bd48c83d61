"""Progress reporting for segment extraction."""

from typing import Optional

from tqdm import tqdm


class ProgressReporter:
    """tqdm bar over extracted tracks, usable directly as the split callback.

    The track count is only known once segments have been derived, so the
    bar is opened on the first call.
    """

    def __init__(self, desc: str = "Divisione"):
        self.desc = desc
        self._bar: Optional[tqdm] = None

    def __call__(self, current: int, total: int, track_title: str) -> None:
        if self._bar is None:
            self._bar = tqdm(
                total=total,
                desc=self.desc,
                unit="traccia",
                bar_format="{l_bar}{bar}| {n_fmt}/{total_fmt} tracce [{elapsed}<{remaining}]",
            )
        self._bar.set_postfix_str(track_title, refresh=False)
        self._bar.update(current - self._bar.n)

    def close(self) -> None:
        if self._bar is not None:
            self._bar.close()
            self._bar = None

    def __enter__(self) -> "ProgressReporter":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
