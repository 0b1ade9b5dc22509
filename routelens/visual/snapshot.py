"""Full-page snapshot capture for exploration stages."""

import re
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from routelens.config import SnapshotConfig

UNSAFE_CHARS = re.compile(r"[^\w.-]+", re.ASCII)


class CaptureError(RuntimeError):
    """Screenshot could not be captured or written."""


def sanitize_name(name: str, max_length: int = 40) -> str:
    """Make an element name safe for use in a filename.

    Args:
        name: Raw element label.
        max_length: Maximum length of the result.

    Returns:
        Sanitized name, or ``unnamed`` if nothing usable remains.
    """
    cleaned = UNSAFE_CHARS.sub("_", name or "")[:max_length]
    return cleaned or "unnamed"


@dataclass
class Snapshot:
    """A captured screenshot."""

    path: str
    label: str
    element_name: str = ""
    route: str = ""


class SnapshotCapture:
    """Write full-page screenshots under unique, readable filenames.

    Filenames follow ``<timestamp>__<label>[__<element-name>].png``. The
    timestamp is in milliseconds and strictly increases per instance, so two
    captures with the same label and name never collide.
    """

    def __init__(self, folder: Path | str, config: Optional[SnapshotConfig] = None):
        """Initialize snapshot capture.

        Args:
            folder: Destination folder, created on first capture.
            config: Filename settings.
        """
        self.folder = Path(folder)
        self.config = config or SnapshotConfig()
        self._last_timestamp = 0

    def next_timestamp(self) -> int:
        """Return a millisecond timestamp greater than any returned before."""
        now = time.time_ns() // 1_000_000
        self._last_timestamp = max(now, self._last_timestamp + 1)
        return self._last_timestamp

    def build_filename(self, label: str, element_name: str = "") -> str:
        filename = f"{self.next_timestamp()}__{label}"
        if element_name:
            filename += "__" + sanitize_name(element_name, self.config.name_max_length)
        return filename + ".png"

    async def capture(self, page: Any, label: str, element_name: str = "") -> str:
        """Capture a full-page screenshot of the page's current state.

        Args:
            page: Playwright page.
            label: Stage label (``initial``, ``hover_<i>``, ``click_<i>``).
            element_name: Optional element label appended to the filename.

        Returns:
            Path of the written file.

        Raises:
            CaptureError: If the screenshot could not be written.
        """
        file_path = self.folder / self.build_filename(label, element_name)

        try:
            self.folder.mkdir(parents=True, exist_ok=True)
            await page.screenshot(path=str(file_path), full_page=True)
        except Exception as e:
            raise CaptureError(f"Failed to capture {label}: {e}") from e

        return str(file_path)
