from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Paths:
    dev_dir: str = "/dev"
    log_default: str = "/var/log/autoinstall-usb.log"
    log_fallback_name: str = "autoinstall-usb.log"
    settings_name: str = "autoinstall-usb.yaml"
    user_data_name: str = "user-data"
    meta_data_name: str = "meta-data"
    grub_cfg_rel: str = "boot/grub/grub.cfg"


PATHS = Paths()

# Mount points that identify a system disk.
PROTECTED_MOUNTPOINTS = frozenset({"/", "/boot", "/home"})

GIB = 1024 * 1024 * 1024
MIB = 1024 * 1024
