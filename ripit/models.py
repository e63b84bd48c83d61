"""Data models for the ripit pipeline."""

import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional


@dataclass(frozen=True)
class ChapterMark:
    """A chapter marker reported by the source."""
    start_seconds: float
    end_seconds: Optional[float] = None
    title: Optional[str] = None


@dataclass(frozen=True)
class MediaItem:
    """One downloaded media file with the metadata used to split it."""
    raw_title: str
    description: str = ""
    chapters: tuple[ChapterMark, ...] = ()
    audio_path: Optional[Path] = None


@dataclass(frozen=True)
class TimestampEntry:
    """A `[HH:]MM:SS Title` line found in a description."""
    seconds: float
    title: str


@dataclass(frozen=True)
class Segment:
    """A contiguous range of the source audio destined for one output file.

    ``end`` is None when the segment runs to the end of the file.
    """
    index: int
    start: float
    end: Optional[float]
    title: str

    @property
    def is_open_ended(self) -> bool:
        return self.end is None

    @property
    def end_label(self) -> str:
        return "EOF" if self.end is None else format_seconds(self.end)


@dataclass
class StrategyAttempt:
    """Outcome of one segment-derivation strategy."""
    method: str
    segments: list[Segment] = field(default_factory=list)
    reason: str = ""
    notes: list[str] = field(default_factory=list)

    @property
    def accepted(self) -> bool:
        return bool(self.segments)


@dataclass
class Derivation:
    """Segments chosen for a media item plus the trace of every strategy tried."""
    segments: list[Segment]
    method: Optional[str]
    attempts: list[StrategyAttempt]


@dataclass
class SplitConfig:
    """Configuration for segment derivation and extraction."""
    silence_db: int = -30
    silence_duration: float = 2.0
    timeout: Optional[float] = None
    cleanup_partial: bool = False


@dataclass
class SplitResult:
    """Aggregate outcome of extracting all segments of one file."""
    succeeded: int = 0
    failed: int = 0
    outputs: list[Path] = field(default_factory=list)
    source_deleted: bool = False

    @property
    def ok(self) -> bool:
        return self.failed == 0


class RipStatus(Enum):
    SUCCESS = "success"
    PARTIAL = "partial"
    FATAL = "fatal"


@dataclass
class RipResult:
    """Final report of one rip invocation."""
    status: RipStatus
    title: str = ""
    output_dir: Optional[Path] = None
    method: Optional[str] = None
    segments: list[Segment] = field(default_factory=list)
    split: Optional[SplitResult] = None
    message: str = ""


def format_seconds(value: float) -> str:
    """Render seconds for ffmpeg and logs without losing sub-second precision."""
    text = f"{value:.6f}".rstrip("0").rstrip(".")
    return text or "0"


@dataclass(frozen=True)
class MediaInfo:
    """Metadata of a single video as reported by the download client."""
    id: str
    title: str
    description: str = ""
    chapters: tuple[ChapterMark, ...] = ()


class DownloadStatus(Enum):
    DOWNLOADED = "downloaded"
    ALREADY_PRESENT = "already_present"
    FAILED = "failed"


def default_base_dir() -> Path:
    """Download root, overridable with the YT_DOWNLOAD_DIR environment variable."""
    return Path(os.environ.get("YT_DOWNLOAD_DIR") or Path.home() / "music" / "YTdownloads")


@dataclass
class RipConfig:
    """Configuration for one rip invocation."""
    base_dir: Path = field(default_factory=default_base_dir)
    split: SplitConfig = field(default_factory=SplitConfig)
    retries: int = 30

    @property
    def archive_file(self) -> Path:
        return self.base_dir / "downloaded_archive.txt"
