from __future__ import annotations

import logging
import shutil
from typing import Callable, List, Mapping, Optional, Sequence

from .command import run_cmd

logger = logging.getLogger(__name__)

# Tool on PATH -> Debian/Ubuntu package providing it.
REQUIRED_TOOLS: Mapping[str, str] = {
    "sgdisk": "gdisk",
    "mkfs.vfat": "dosfstools",
    "rsync": "rsync",
    "partprobe": "parted",
    "lsblk": "util-linux",
}


def missing_tools(
    required: Mapping[str, str] = REQUIRED_TOOLS,
    *,
    which: Callable[[str], Optional[str]] = shutil.which,
) -> List[str]:
    return [tool for tool in required if which(tool) is None]


def apt_update(*, dry_run: bool = False) -> None:
    run_cmd(["apt-get", "update", "-qq"], dry_run=dry_run)


def apt_install(packages: Sequence[str], *, dry_run: bool = False) -> None:
    if not packages:
        return
    run_cmd(
        ["apt-get", "install", "-y", *packages],
        env={"DEBIAN_FRONTEND": "noninteractive"},
        dry_run=dry_run,
    )


def install_host_tools(required: Mapping[str, str] = REQUIRED_TOOLS, *, dry_run: bool = False) -> List[str]:
    """Install the full tool package set on the host. Returns the package list."""

    packages = sorted(set(required.values()))
    logger.info("Installing host packages: %s", ", ".join(packages))
    apt_update(dry_run=dry_run)
    apt_install(packages, dry_run=dry_run)
    return packages
