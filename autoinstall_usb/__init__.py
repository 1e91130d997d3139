"""Ubuntu Server autoinstall USB maker.

Builds a bootable USB stick from an Ubuntu Server image plus a NoCloud
user-data/meta-data pair, with GRUB defaulting to an unattended install.

Core design goals:
- Linear, fail-fast pipeline of steps
- Validate everything before touching the device
- All device mutation behind a DiskOps backend (real or dry-run)
- Centralized logging
"""

__version__ = "1.0.0"

__all__ = []
