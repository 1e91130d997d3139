from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from ..errors import InstallerError
from .command import run_cmd
from .env import GIB, PATHS, PROTECTED_MOUNTPOINTS

logger = logging.getLogger(__name__)

LSBLK_SUMMARY_COLUMNS = "NAME,SIZE,TYPE,VENDOR,MODEL,MOUNTPOINT"


@dataclass(frozen=True)
class BlockDevice:
    path: str
    size_bytes: int
    partitions: List[str] = field(default_factory=list)
    mountpoints: List[str] = field(default_factory=list)

    @property
    def size_gib(self) -> int:
        return self.size_bytes // GIB


def device_path(name: str) -> str:
    """Map a short name (sdc) or a /dev path to the device node path."""

    name = name.strip()
    if name.startswith(PATHS.dev_dir + "/"):
        return name
    return str(Path(PATHS.dev_dir) / name)


def partition_path(device: str, n: int, *, exists: Callable[[str], bool]) -> Optional[str]:
    """Return the node of partition n, trying sdX1 then nvme0n1p1 naming."""

    for candidate in (f"{device}{n}", f"{device}p{n}"):
        if exists(candidate):
            return candidate
    return None


def _collect(node: Dict[str, Any], mountpoints: List[str], partitions: List[str]) -> None:
    for key in ("mountpoint", "mountpoints"):
        value = node.get(key)
        if isinstance(value, str):
            mountpoints.append(value)
        elif isinstance(value, list):
            mountpoints.extend(m for m in value if m)
    for child in node.get("children") or []:
        if child.get("path"):
            partitions.append(child["path"])
        _collect(child, mountpoints, partitions)


def parse_lsblk_json(text: str) -> BlockDevice:
    data = json.loads(text)
    devices = data.get("blockdevices") or []
    if not devices:
        raise InstallerError("lsblk returned no block devices")
    top = devices[0]

    mountpoints: List[str] = []
    partitions: List[str] = []
    _collect(top, mountpoints, partitions)

    return BlockDevice(
        path=str(top.get("path") or ""),
        size_bytes=int(top.get("size") or 0),
        partitions=partitions,
        mountpoints=sorted(set(mountpoints)),
    )


def inspect_device(path: str) -> BlockDevice:
    r = run_cmd(["lsblk", "--json", "--bytes", "--output", "PATH,SIZE,TYPE,MOUNTPOINT", path])
    return parse_lsblk_json(r.stdout)


def list_disks() -> str:
    """Human-readable disk listing for the device prompt."""

    r = run_cmd(["lsblk", "-o", LSBLK_SUMMARY_COLUMNS], check=False)
    lines = r.stdout.splitlines()
    keep = [ln for i, ln in enumerate(lines) if i == 0 or " disk " in f" {ln} "]
    return "\n".join(keep)


def describe_device(path: str) -> str:
    r = run_cmd(["lsblk", path, "-o", LSBLK_SUMMARY_COLUMNS], check=False)
    return r.stdout.rstrip()


def check_device(dev: BlockDevice, *, min_gib: int, recommended_gib: int) -> List[str]:
    """Safety checks on an existing device. Returns warnings, raises on failure."""

    protected = sorted(PROTECTED_MOUNTPOINTS.intersection(dev.mountpoints))
    if protected:
        raise InstallerError(
            f"Refusing to use a system disk: {dev.path} has {', '.join(protected)} mounted",
            hint="Pick the USB stick, not the disk the running system lives on.",
        )

    warnings: List[str] = []
    if dev.size_gib < min_gib:
        raise InstallerError(
            f"Device too small ({dev.size_gib}GB), at least {min_gib}GB required",
            hint=f"Use a USB stick of {recommended_gib}GB or more.",
        )
    if dev.size_gib < recommended_gib:
        warnings.append(f"Device is small ({dev.size_gib}GB), {recommended_gib}GB or more recommended")
    return warnings
