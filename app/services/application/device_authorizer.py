"""Optional device allow-list gate for ingestion.

The allow-list is a plain text file with one device id per line. Blank
lines and ``#`` comments are ignored, and ids compare case-insensitively.

* file absent            -> every device may write
* file present, no ids   -> no device may write
* file present, unusable -> :class:`ConfigError`

Staleness policy: the file is read again on every check, so edits take
effect with the next request and nothing is cached between requests.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from app.domain.exceptions import ConfigError

logger = logging.getLogger(__name__)


def normalize_device_id(device_id: str) -> str:
    return device_id.strip().casefold()


def parse_allowlist(text: str) -> frozenset[str]:
    entries = set()
    for line in text.splitlines():
        value = line.strip()
        if not value or value.startswith("#"):
            continue
        entries.add(normalize_device_id(value))
    return frozenset(entries)


class DeviceAuthorizer:
    """Checks device ids against the allow-list file."""

    def __init__(self, allowlist_path: str | Path) -> None:
        self.allowlist_path = Path(allowlist_path)

    def load_allowlist(self) -> Optional[frozenset[str]]:
        """Current allow-list, or ``None`` when no file restricts ingestion."""
        if not self.allowlist_path.exists():
            return None
        try:
            text = self.allowlist_path.read_text(encoding="utf-8-sig")
        except (OSError, UnicodeDecodeError) as exc:
            raise ConfigError(
                f"Allow-list file is not readable: {self.allowlist_path}",
                detail={"path": str(self.allowlist_path)},
            ) from exc
        return parse_allowlist(text)

    def is_allowed(self, device_id: str) -> bool:
        allowed = self.load_allowlist()
        if allowed is None:
            return True
        return normalize_device_id(device_id) in allowed
