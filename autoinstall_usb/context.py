from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Optional

from .lib import console
from .lib.block import BlockDevice
from .lib.cloudconfig import ValidationReport
from .lib.env import PATHS
from .lib.image import InstallerImage
from .lib.storage import DiskOps, SystemDiskOps
from .lib.writer import WriteResult
from .settings import Settings


@dataclass(frozen=True)
class RunConfig:
    """Operator choices for one run. Immutable once parsed."""

    base_dir: Path = field(default_factory=Path.cwd)
    device: Optional[str] = None
    auto_yes: bool = False
    check_only: bool = False
    dry_run: bool = False
    settings: Settings = field(default_factory=Settings)

    @property
    def user_data(self) -> Path:
        return self.base_dir / PATHS.user_data_name

    @property
    def meta_data(self) -> Path:
        return self.base_dir / PATHS.meta_data_name


@dataclass
class RunContext:
    config: RunConfig
    ops: DiskOps
    prompt: Callable[[str], str] = console.ask

    # Filled in by the steps, in pipeline order.
    report: Optional[ValidationReport] = None
    image: Optional[InstallerImage] = None
    device_path: Optional[str] = None
    device: Optional[BlockDevice] = None
    result: Optional[WriteResult] = None

    @classmethod
    def for_system(cls, config: RunConfig) -> "RunContext":
        return cls(config=config, ops=SystemDiskOps(dry_run=config.dry_run))
