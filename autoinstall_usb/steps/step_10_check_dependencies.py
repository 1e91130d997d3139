from __future__ import annotations

import logging

from ..context import RunContext
from ..lib import console
from ..lib.pkg import install_host_tools, missing_tools

logger = logging.getLogger(__name__)


class CheckDependenciesStep:
    step_id = "10_check_dependencies"
    title = "Dependency check"

    def run(self, ctx: RunContext) -> RunContext:
        cfg = ctx.config
        console.log("Checking required tools...")

        missing = missing_tools()
        if missing:
            console.warn(f"Missing tools: {' '.join(missing)}")
            if cfg.check_only:
                # No privileges assumed here; writing needs them and will install.
                console.info("Not installing in check-only mode")
                return ctx
            console.log("Installing dependencies...")
            install_host_tools(dry_run=cfg.dry_run)

        console.ok("Dependency check complete")
        return ctx
