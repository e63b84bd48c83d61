"""Audio utility functions - ffmpeg paths and subprocess wrapper."""

import subprocess
from typing import Optional

import static_ffmpeg


def get_ffmpeg_paths() -> tuple[str, str]:
    """Return (ffmpeg_path, ffprobe_path) using the bundled static-ffmpeg binaries.

    Downloads binaries on first use if not already present.
    """
    ffmpeg_path, ffprobe_path = static_ffmpeg.run.get_or_fetch_platform_executables_else_raise()
    return ffmpeg_path, ffprobe_path


def get_ffmpeg() -> str:
    """Return the path to the ffmpeg executable."""
    ffmpeg, _ = get_ffmpeg_paths()
    return ffmpeg


def check_ffmpeg() -> None:
    """Verify that ffmpeg and ffprobe are available (downloads if needed)."""
    try:
        get_ffmpeg_paths()
    except Exception as e:
        raise RuntimeError(
            f"Impossibile ottenere ffmpeg: {e}\n"
            f"Prova a reinstallare: pip install --force-reinstall static-ffmpeg"
        ) from e


def run_ffmpeg(
    args: list[str],
    *,
    check: bool = True,
    timeout: Optional[float] = None,
) -> subprocess.CompletedProcess:
    """Run ffmpeg with the given arguments, capturing text output."""
    return subprocess.run(
        [get_ffmpeg(), *args],
        capture_output=True,
        text=True,
        check=check,
        timeout=timeout,
    )

