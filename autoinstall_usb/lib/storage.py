from __future__ import annotations

import logging
import os
import shutil
import stat
import time
from pathlib import Path
from typing import Protocol, Sequence

from .command import run_cmd

logger = logging.getLogger(__name__)


class DiskOps(Protocol):
    """Everything the writer does to a device or a mounted volume.

    Methods documented as best-effort return a bool instead of raising; the
    caller decides whether the result matters.
    """

    def unmount(self, target: str, *, best_effort: bool = False) -> bool:
        ...

    def wipe(self, device: str, *, mib: int) -> bool:
        ...

    def create_partition_table(self, device: str, *, label: str) -> None:
        ...

    def rescan(self, device: str) -> bool:
        ...

    def is_block_device(self, path: str) -> bool:
        ...

    def format_volume(self, partition: str, *, label: str) -> None:
        ...

    def mount_volume(self, source: str, target: str, *, image: bool = False) -> None:
        ...

    def copy_tree(self, src: str, dst: str, *, excludes: Sequence[str]) -> bool:
        ...

    def install_file(self, src: str, dst: str, *, mode: int = 0o644) -> None:
        ...

    def write_text(self, dst: str, content: str, *, backup_suffix: str | None = None) -> None:
        ...

    def sync(self) -> None:
        ...


def is_block_device(path: str) -> bool:
    try:
        return stat.S_ISBLK(os.stat(path).st_mode)
    except OSError:
        return False


class SystemDiskOps:
    """DiskOps backed by sgdisk/mkfs.vfat/mount/rsync.

    With dry_run every command is logged but not executed and file writes are
    skipped.
    """

    def __init__(self, *, dry_run: bool = False, settle_s: float = 2.0) -> None:
        self.dry_run = dry_run
        self.settle_s = settle_s

    def unmount(self, target: str, *, best_effort: bool = False) -> bool:
        r = run_cmd(["umount", target], check=not best_effort, dry_run=self.dry_run)
        return r.ok

    def wipe(self, device: str, *, mib: int) -> bool:
        # Both commands are best-effort: a blank device has no table to zap.
        zap = run_cmd(["sgdisk", "--zap-all", device], check=False, dry_run=self.dry_run)
        zero = run_cmd(
            ["dd", "if=/dev/zero", f"of={device}", "bs=1M", f"count={mib}", "conv=fsync"],
            check=False,
            dry_run=self.dry_run,
        )
        return zap.ok and zero.ok

    def create_partition_table(self, device: str, *, label: str) -> None:
        run_cmd(
            [
                "sgdisk",
                "--new=1:0:0",
                "--typecode=1:ef00",
                f"--change-name=1:{label}",
                device,
            ],
            dry_run=self.dry_run,
        )

    def rescan(self, device: str) -> bool:
        if not self.dry_run:
            time.sleep(self.settle_s)
        r = run_cmd(["partprobe", device], check=False, dry_run=self.dry_run)
        if not self.dry_run:
            time.sleep(self.settle_s / 2)
        return r.ok

    def is_block_device(self, path: str) -> bool:
        # Partitions are never created in dry-run, pretend they were.
        if self.dry_run:
            return True
        return is_block_device(path)

    def format_volume(self, partition: str, *, label: str) -> None:
        run_cmd(["mkfs.vfat", "-F", "32", "-n", label, partition], dry_run=self.dry_run)

    def mount_volume(self, source: str, target: str, *, image: bool = False) -> None:
        argv = ["mount"]
        if image:
            argv += ["-o", "loop,ro"]
        run_cmd([*argv, source, target], dry_run=self.dry_run)

    def copy_tree(self, src: str, dst: str, *, excludes: Sequence[str]) -> bool:
        argv = ["rsync", "-aL", "--info=progress2"]
        argv += [f"--exclude={e}" for e in excludes]
        # Trailing slashes: copy the contents of src, not src itself.
        argv += [src.rstrip("/") + "/", dst.rstrip("/") + "/"]
        r = run_cmd(argv, check=False, capture=False, dry_run=self.dry_run)
        if not r.ok:
            logger.warning("rsync exited with %s", r.returncode)
        return r.ok

    def install_file(self, src: str, dst: str, *, mode: int = 0o644) -> None:
        if self.dry_run:
            logger.info("Would install %s -> %s (mode %o)", src, dst, mode)
            return
        shutil.copyfile(src, dst)
        os.chmod(dst, mode)

    def write_text(self, dst: str, content: str, *, backup_suffix: str | None = None) -> None:
        p = Path(dst)
        if self.dry_run:
            logger.info("Would write %s", str(p))
            return
        if backup_suffix and p.exists():
            shutil.copy2(p, p.with_name(p.name + backup_suffix))
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_text(content, encoding="utf-8")

    def sync(self) -> None:
        run_cmd(["sync"], dry_run=self.dry_run)
