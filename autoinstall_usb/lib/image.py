from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence

from ..errors import InstallerError
from .env import MIB

logger = logging.getLogger(__name__)

_VERSION_RE = re.compile(r"^ubuntu-(\d+\.\d+(?:\.\d+)?)-")


@dataclass(frozen=True)
class InstallerImage:
    path: Path
    size_bytes: int
    server: bool = True

    @property
    def name(self) -> str:
        return self.path.name

    @property
    def size_mib(self) -> int:
        return self.size_bytes // MIB

    @property
    def version(self) -> Optional[str]:
        m = _VERSION_RE.match(self.path.name)
        return m.group(1) if m else None


def _glob_first(base_dir: Path, patterns: Sequence[str]) -> Optional[Path]:
    matches: List[Path] = []
    for pattern in patterns:
        matches.extend(p for p in base_dir.glob(pattern) if p.is_file())
    if not matches:
        return None
    return sorted(matches)[0]


def locate_image(
    base_dir: Path,
    *,
    patterns: Sequence[str],
    fallback_patterns: Sequence[str],
    download_hint: str = "",
) -> InstallerImage:
    """Pick the installer image in base_dir (non-recursive, first match wins)."""

    server = True
    path = _glob_first(base_dir, patterns)
    if path is None:
        server = False
        path = _glob_first(base_dir, fallback_patterns)
    if path is None:
        raise InstallerError(f"No Ubuntu installer image found in {base_dir}", hint=download_hint or None)

    image = InstallerImage(path=path, size_bytes=path.stat().st_size, server=server)
    logger.info("Selected image %s (%d MiB, server=%s)", str(path), image.size_mib, server)
    return image
