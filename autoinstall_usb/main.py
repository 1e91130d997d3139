from __future__ import annotations

import argparse
import logging
import os
from pathlib import Path
from typing import Optional

from .context import RunConfig, RunContext
from .errors import Cancelled, InstallerError
from .lib import console
from .lib.env import PATHS
from .logging_utils import DEFAULT_LOG_PATH, configure_logging
from .pipeline import PipelineResult, run_pipeline
from .settings import Settings, load_settings
from .steps import (
    CheckDependenciesStep,
    ConfirmStep,
    LocateImageStep,
    SelectDeviceStep,
    ShowInstructionsStep,
    ValidateConfigStep,
    ValidateDeviceStep,
    WriteUsbStep,
)

logger = logging.getLogger(__name__)

BANNER = "Ubuntu Server Autoinstall USB Maker"
CHECK_ONLY_LAST_STEP = "30_locate_image"

EPILOG = """\
examples:
  sudo autoinstall-usb                  # interactive
  sudo autoinstall-usb -d sdc -y        # write to /dev/sdc without asking
  autoinstall-usb --check-only          # only check the configuration
"""


def build_steps():
    return [
        CheckDependenciesStep(),
        ValidateConfigStep(),
        LocateImageStep(),
        SelectDeviceStep(),
        ValidateDeviceStep(),
        ConfirmStep(),
        WriteUsbStep(),
        ShowInstructionsStep(),
    ]


def resolve_settings(base_dir: Path, config_path: Optional[str]) -> Settings:
    if config_path:
        return load_settings(config_path)
    default = base_dir / PATHS.settings_name
    if default.exists():
        return load_settings(str(default))
    return Settings()


def require_root(cfg: RunConfig) -> None:
    if cfg.check_only or cfg.dry_run:
        return
    if os.geteuid() != 0:
        raise InstallerError("Writing a USB stick requires root", hint="Run again with sudo.", step="Startup")


def run(ctx: RunContext) -> PipelineResult:
    """Run the full pipeline (or the check-only prefix of it)."""

    require_root(ctx.config)
    stop_after = CHECK_ONLY_LAST_STEP if ctx.config.check_only else None
    result = run_pipeline(ctx=ctx, steps=build_steps(), stop_after=stop_after)
    logger.info("Ran steps: %s", ", ".join(result.ran_steps))
    return result


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="autoinstall-usb",
        description=BANNER,
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    p.add_argument("-d", "--device", default=None, metavar="DEV", help="USB device name (e.g. sdc)")
    p.add_argument("-y", "--yes", action="store_true", help="Skip confirmation prompts")
    p.add_argument("--check-only", action="store_true", help="Only check the configuration, do not write")
    p.add_argument("--dir", default=".", help="Directory holding user-data, meta-data and the image")
    p.add_argument("--config", default=None, help=f"Settings file (default: <dir>/{PATHS.settings_name})")
    p.add_argument("--log", default=DEFAULT_LOG_PATH, help="Path to log file")
    p.add_argument("--dry-run", action="store_true", help="Log commands instead of running them")
    p.add_argument("-v", "--verbose", action="store_true", help="Mirror the log on the console")
    return p


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    configure_logging(log_path=args.log, also_console=bool(args.verbose))

    console.plain("==============================================")
    console.plain(f"  {BANNER}")
    console.plain("==============================================")
    console.plain()

    base_dir = Path(args.dir).expanduser().resolve()
    try:
        cfg = RunConfig(
            base_dir=base_dir,
            device=args.device,
            auto_yes=bool(args.yes),
            check_only=bool(args.check_only),
            dry_run=bool(args.dry_run),
            settings=resolve_settings(base_dir, args.config),
        )
        run(RunContext.for_system(cfg))
    except Cancelled as e:
        logger.info("%s", e)
        console.log("Operation cancelled")
        return 0
    except InstallerError as e:
        logger.exception("Run failed")
        stage = f"{e.step}: " if e.step else ""
        console.error(f"{stage}{e}")
        if e.hint:
            console.info(e.hint)
        return 1

    console.plain()
    if cfg.check_only:
        console.ok("Configuration check complete, no USB stick was written")
    else:
        console.ok("All done!")
    return 0
