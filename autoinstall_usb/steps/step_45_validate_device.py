from __future__ import annotations

import logging

from ..context import RunContext
from ..errors import InstallerError
from ..lib import console
from ..lib.block import check_device, inspect_device
from ..lib.storage import is_block_device

logger = logging.getLogger(__name__)


class ValidateDeviceStep:
    step_id = "45_validate_device"
    title = "Device check"

    def run(self, ctx: RunContext) -> RunContext:
        path = ctx.device_path
        if not path:
            raise InstallerError("No device selected; run device selection first")

        console.log(f"Validating device {path}...")
        if not is_block_device(path):
            raise InstallerError(
                f"Device not found: {path}",
                hint="Check the name with lsblk; pass it without /dev/.",
            )

        s = ctx.config.settings
        dev = inspect_device(path)
        for w in check_device(dev, min_gib=s.min_capacity_gib, recommended_gib=s.recommended_capacity_gib):
            console.warn(w)
        console.info(f"Device capacity: {dev.size_gib}GB")

        ctx.device = dev
        console.ok("Device check passed")
        return ctx
