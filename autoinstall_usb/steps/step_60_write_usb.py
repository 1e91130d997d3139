from __future__ import annotations

import logging

from ..context import RunContext
from ..errors import InstallerError
from ..lib.bootloader import default_entries, render_grub_menu
from ..lib.writer import WritePlan, write_installer

logger = logging.getLogger(__name__)


class WriteUsbStep:
    step_id = "60_write_usb"
    title = "USB write"

    def run(self, ctx: RunContext) -> RunContext:
        cfg = ctx.config
        s = cfg.settings
        if ctx.image is None or ctx.device is None:
            raise InstallerError("Missing image/device; run lookup and device checks first")

        menu = render_grub_menu(
            default_entries(s.product_name, ctx.image.version),
            timeout=s.grub_timeout,
        )
        plan = WritePlan(
            device=ctx.device.path,
            partitions=list(ctx.device.partitions),
            image=str(ctx.image.path),
            user_data=str(cfg.user_data),
            meta_data=str(cfg.meta_data),
            menu=menu,
            label=s.volume_label,
            wipe_mib=s.wipe_mib,
            excludes=s.copy_excludes,
            failure_policy=s.copy_failure_policy,
            required_files=s.copy_required_files,
        )
        ctx.result = write_installer(ctx.ops, plan)
        logger.info("Wrote %s to %s", plan.image, ctx.result.partition)
        return ctx
