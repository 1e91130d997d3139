from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List

import yaml

from .errors import InstallerError

COPY_FAILURE_POLICIES = ("require_files", "abort")

DEFAULT_IMAGE_PATTERNS = ["ubuntu-*-live-server-*.iso"]
DEFAULT_FALLBACK_PATTERNS = ["ubuntu-*.iso"]
DEFAULT_DOWNLOAD_HINT = (
    "Download the Server image, e.g.:\n"
    "  wget https://releases.ubuntu.com/24.04/ubuntu-24.04.1-live-server-amd64.iso"
)
# Self-referential "ubuntu -> ." symlink, checksum manifest and disk identification files.
DEFAULT_COPY_EXCLUDES = ["ubuntu", "md5sum.txt", "README.diskdefines", ".disk/info"]
DEFAULT_REQUIRED_FILES = ["casper/vmlinuz"]
DEFAULT_PLACEHOLDER_TOKENS = ["YOUR_", "CHANGE_THIS", "REPLACE_ME"]


def _int_setting(value: Any, default: int, key: str) -> int:
    if value is None:
        return default
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise InstallerError(f"{key} must be an integer, got: {value!r}") from e


@dataclass(frozen=True)
class Settings:
    raw: Dict[str, Any] = field(default_factory=dict)

    def _section(self, name: str) -> Dict[str, Any]:
        section = self.raw.get(name)
        if section is None:
            return {}
        if not isinstance(section, dict):
            raise InstallerError(f"{name} must be a mapping, got: {section!r}")
        return section

    @property
    def volume_label(self) -> str:
        return str(self.raw.get("volume_label") or "UBUNTU_SRV")

    @property
    def min_capacity_gib(self) -> int:
        return _int_setting(self.raw.get("min_capacity_gib"), 4, "min_capacity_gib")

    @property
    def recommended_capacity_gib(self) -> int:
        return _int_setting(self.raw.get("recommended_capacity_gib"), 8, "recommended_capacity_gib")

    @property
    def wipe_mib(self) -> int:
        return _int_setting(self.raw.get("wipe_mib"), 10, "wipe_mib")

    @property
    def placeholder_tokens(self) -> List[str]:
        return list(self.raw.get("placeholder_tokens") or DEFAULT_PLACEHOLDER_TOKENS)

    @property
    def image_patterns(self) -> List[str]:
        return list(self._section("image").get("patterns") or DEFAULT_IMAGE_PATTERNS)

    @property
    def image_fallback_patterns(self) -> List[str]:
        return list(self._section("image").get("fallback_patterns") or DEFAULT_FALLBACK_PATTERNS)

    @property
    def fat32_warn_mib(self) -> int:
        return _int_setting(self._section("image").get("fat32_warn_mib"), 4000, "image.fat32_warn_mib")

    @property
    def download_hint(self) -> str:
        return str(self._section("image").get("download_hint") or DEFAULT_DOWNLOAD_HINT)

    @property
    def copy_excludes(self) -> List[str]:
        excludes = self._section("copy").get("excludes")
        return list(DEFAULT_COPY_EXCLUDES if excludes is None else excludes)

    @property
    def copy_failure_policy(self) -> str:
        return str(self._section("copy").get("failure_policy") or "require_files")

    @property
    def copy_required_files(self) -> List[str]:
        return list(self._section("copy").get("required_files") or DEFAULT_REQUIRED_FILES)

    @property
    def grub_timeout(self) -> int:
        return _int_setting(self._section("grub").get("timeout"), 30, "grub.timeout")

    @property
    def product_name(self) -> str:
        return str(self._section("grub").get("product_name") or "Ubuntu Server")


def load_settings(path: str) -> Settings:
    p = Path(path)
    if not p.exists():
        raise InstallerError(f"Settings file not found: {path}")

    try:
        raw = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    except UnicodeDecodeError as e:
        raise InstallerError(f"{path} is not valid UTF-8: {e}") from e
    except yaml.YAMLError as e:
        raise InstallerError(f"Invalid YAML in {path}: {e}") from e
    if not isinstance(raw, dict):
        raise InstallerError(f"{path} must contain a mapping/object")

    settings = Settings(raw=raw)
    # Read every typed value once so bad entries fail here, not mid-run.
    for name in (
        "min_capacity_gib",
        "recommended_capacity_gib",
        "wipe_mib",
        "fat32_warn_mib",
        "grub_timeout",
        "copy_excludes",
    ):
        getattr(settings, name)
    if settings.copy_failure_policy not in COPY_FAILURE_POLICIES:
        raise InstallerError(
            f"copy.failure_policy must be one of {', '.join(COPY_FAILURE_POLICIES)}, "
            f"got: {settings.copy_failure_policy}"
        )
    return settings
