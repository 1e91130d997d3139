from __future__ import annotations

import logging
import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional, Sequence

from ..errors import InstallerError
from . import console
from .block import partition_path
from .env import PATHS
from .storage import DiskOps

logger = logging.getLogger(__name__)

BACKUP_SUFFIX = ".backup"


@dataclass(frozen=True)
class WritePlan:
    device: str
    partitions: Sequence[str]
    image: str
    user_data: str
    meta_data: str
    menu: str
    label: str = "UBUNTU_SRV"
    wipe_mib: int = 10
    excludes: Sequence[str] = ()
    failure_policy: str = "require_files"
    required_files: Sequence[str] = ("casper/vmlinuz",)


@dataclass
class WriteResult:
    partition: str
    copy_complete: bool
    menu_path: str
    best_effort_failures: List[str] = field(default_factory=list)


def _copy_failure_tolerated(plan: WritePlan, usb_mnt: str) -> bool:
    if plan.failure_policy != "require_files":
        return False
    missing = [rel for rel in plan.required_files if not (Path(usb_mnt) / rel).exists()]
    if missing:
        logger.error("Copy incomplete, missing on target: %s", ", ".join(missing))
        return False
    return True


def _release(ops: DiskOps, mountpoints: Sequence[str]) -> None:
    """Undo mounts after a failure. Errors here must not mask the one being raised."""

    for mnt in mountpoints:
        if not ops.unmount(mnt, best_effort=True):
            logger.warning("Could not unmount %s during cleanup", mnt)
        try:
            os.rmdir(mnt)
        except OSError as e:
            logger.warning("Leaving mount point %s in place: %s", mnt, e)


def prepare_device(ops: DiskOps, plan: WritePlan) -> tuple[str, List[str]]:
    """Unmount, wipe, partition and format. Returns (partition, best-effort failures)."""

    failures: List[str] = []

    console.log("Unmounting existing partitions...")
    # Partitions are usually not mounted at all, so failures are expected.
    for part in plan.partitions:
        if not ops.unmount(part, best_effort=True):
            failures.append(f"unmount {part}")

    console.log("Clearing partition table...")
    # A blank or odd device may have no table to zap; the next step rewrites it anyway.
    if not ops.wipe(plan.device, mib=plan.wipe_mib):
        failures.append(f"wipe {plan.device}")

    console.log("Creating GPT partition table...")
    ops.create_partition_table(plan.device, label=plan.label)

    # partprobe may complain about busy devices even when the kernel has picked up the table.
    if not ops.rescan(plan.device):
        failures.append(f"rescan {plan.device}")

    part = partition_path(plan.device, 1, exists=ops.is_block_device)
    if part is None:
        raise InstallerError(
            f"Partition not found: {plan.device}1 or {plan.device}p1",
            hint="Replug the USB stick and run again.",
        )

    console.log("Formatting as FAT32...")
    ops.format_volume(part, label=plan.label)

    if failures:
        logger.info("Ignored best-effort failures: %s", ", ".join(failures))
    return part, failures


def populate_volume(ops: DiskOps, plan: WritePlan, usb_mnt: str, iso_mnt: str) -> bool:
    """Copy image contents, configuration and boot menu. Returns False on a tolerated partial copy."""

    console.log("Copying image contents (this takes a few minutes)...")
    complete = ops.copy_tree(iso_mnt, usb_mnt, excludes=plan.excludes)
    if not complete:
        if not _copy_failure_tolerated(plan, usb_mnt):
            raise InstallerError("Copying the image contents failed", hint="Check the image file and the USB stick.")
        console.warn("Some files failed to copy, but the boot files are present")
    console.ok("Image contents copied")

    console.log("Deploying autoinstall configuration...")
    ops.install_file(plan.user_data, str(Path(usb_mnt) / PATHS.user_data_name), mode=0o644)
    ops.install_file(plan.meta_data, str(Path(usb_mnt) / PATHS.meta_data_name), mode=0o644)
    console.ok("Configuration files deployed")

    console.log("Configuring GRUB menu...")
    ops.write_text(str(Path(usb_mnt) / PATHS.grub_cfg_rel), plan.menu, backup_suffix=BACKUP_SUFFIX)
    console.ok("GRUB menu configured")
    return complete


def write_installer(
    ops: DiskOps,
    plan: WritePlan,
    *,
    mkdtemp: Optional[Callable[..., str]] = None,
) -> WriteResult:
    """Destructively turn plan.device into a bootable autoinstall USB stick.

    Single attempt, no rollback. On failure after mounting, both mounts are
    released before the error propagates; the device itself is left as is.
    """

    mkdtemp = mkdtemp or tempfile.mkdtemp
    console.log("Creating the USB installer...")
    part, failures = prepare_device(ops, plan)

    usb_mnt = mkdtemp(prefix="autoinstall-usb-")
    iso_mnt = mkdtemp(prefix="autoinstall-iso-")

    try:
        console.log("Mounting volumes...")
        ops.mount_volume(part, usb_mnt)
        ops.mount_volume(plan.image, iso_mnt, image=True)

        complete = populate_volume(ops, plan, usb_mnt, iso_mnt)

        console.log("Syncing data to the USB stick (do not unplug)...")
        ops.sync()
        ops.sync()
    except Exception:
        _release(ops, [usb_mnt, iso_mnt])
        raise

    try:
        ops.unmount(usb_mnt)
        ops.unmount(iso_mnt)
    except Exception:
        _release(ops, [usb_mnt, iso_mnt])
        raise
    os.rmdir(usb_mnt)
    os.rmdir(iso_mnt)

    console.ok("USB installer created")
    return WriteResult(
        partition=part,
        copy_complete=complete,
        menu_path=PATHS.grub_cfg_rel,
        best_effort_failures=failures,
    )
