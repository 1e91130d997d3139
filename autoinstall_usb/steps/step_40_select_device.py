from __future__ import annotations

import logging

from ..context import RunContext
from ..errors import InstallerError
from ..lib import console
from ..lib.block import device_path, list_disks

logger = logging.getLogger(__name__)


class SelectDeviceStep:
    step_id = "40_select_device"
    title = "Device selection"

    def run(self, ctx: RunContext) -> RunContext:
        name = ctx.config.device
        if not name:
            console.log("Scanning storage devices...")
            console.plain()
            console.plain(list_disks())
            console.plain()
            name = ctx.prompt("USB device name (e.g. sdc, without /dev/): ").strip()
            if not name:
                raise InstallerError("No device name given")

        ctx.device_path = device_path(name)
        logger.info("Selected device %s", ctx.device_path)
        return ctx
