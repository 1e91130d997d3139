from __future__ import annotations

import logging

from ..context import RunContext
from ..errors import Cancelled
from ..lib import console
from ..lib.block import describe_device

logger = logging.getLogger(__name__)

CONFIRM_TOKEN = "YES"


class ConfirmStep:
    step_id = "50_confirm"
    title = "Confirmation"

    def run(self, ctx: RunContext) -> RunContext:
        if ctx.config.auto_yes:
            logger.info("Confirmation skipped (--yes)")
            return ctx

        path = ctx.device_path or ""
        console.plain()
        console.warn("==========================================")
        console.warn("  WARNING: about to format this device")
        console.warn("==========================================")
        console.plain(describe_device(path))
        console.plain()
        console.warn("ALL DATA ON IT WILL BE ERASED!")
        console.plain()

        answer = ctx.prompt(f"Type {CONFIRM_TOKEN} (uppercase) to confirm: ")
        if answer.strip() != CONFIRM_TOKEN:
            raise Cancelled(f"Operator declined to erase {path}")
        return ctx
