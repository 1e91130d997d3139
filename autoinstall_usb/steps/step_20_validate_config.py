from __future__ import annotations

import logging

from ..context import RunContext
from ..errors import InstallerError
from ..lib import console
from ..lib.cloudconfig import validate_config_pair

logger = logging.getLogger(__name__)


class ValidateConfigStep:
    step_id = "20_validate_config"
    title = "Configuration check"

    def run(self, ctx: RunContext) -> RunContext:
        cfg = ctx.config
        console.log("Validating configuration files...")

        report = validate_config_pair(
            cfg.user_data,
            cfg.meta_data,
            placeholder_tokens=cfg.settings.placeholder_tokens,
            dry_run=cfg.dry_run,
        )
        ctx.report = report

        if report.meta_data_created:
            console.warn(f"meta-data was missing, created {cfg.meta_data}")
        for hit in report.placeholders:
            console.info(f"line {hit.lineno}: {hit.line}")
        for w in report.warnings:
            console.warn(w)
        for n in report.notes:
            console.ok(n)
        if report.hostname:
            console.info(f"Hostname: {report.hostname}")
        if report.username:
            console.info(f"Username: {report.username}")

        if report.ok:
            console.ok("Configuration files look good")
            return ctx

        console.warn("The configuration has problems, fix them before writing the USB stick")
        if cfg.check_only or cfg.auto_yes:
            return ctx

        answer = ctx.prompt("Continue anyway? (y/N): ").strip()
        if answer not in ("y", "Y"):
            raise InstallerError(
                "Aborted because of configuration warnings",
                hint=f"Edit {cfg.user_data} and run again.",
            )
        return ctx
