"""Checks on the autoinstall user-data / meta-data pair.

Nothing here raises for quality problems: findings are collected as warnings
on a ValidationReport and the caller decides whether to continue.
"""

from __future__ import annotations

import logging
import re
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Optional, Sequence

import yaml

from ..errors import InstallerError

logger = logging.getLogger(__name__)

PREFERRED_HASH_PREFIX = "$6$"
# crypt(3) prefixes: md5, bcrypt, sha-256, sha-512, scrypt, yescrypt, gost-yescrypt.
HASH_PREFIXES = ("$1$", "$2a$", "$2b$", "$2y$", "$5$", "$6$", "$7$", "$y$", "$gy$")

_CREDENTIAL_RE = re.compile(r"^\s*(?:-\s*)?(password|passwd)\s*:\s*(.*?)\s*$")
_AUTOINSTALL_RE = re.compile(r"^autoinstall\s*:", re.MULTILINE)


@dataclass(frozen=True)
class PlaceholderHit:
    lineno: int
    token: str
    line: str


@dataclass
class ValidationReport:
    warnings: List[str] = field(default_factory=list)
    notes: List[str] = field(default_factory=list)
    placeholders: List[PlaceholderHit] = field(default_factory=list)
    hostname: Optional[str] = None
    username: Optional[str] = None
    meta_data_created: bool = False
    parsed: Any = None

    @property
    def ok(self) -> bool:
        return not self.warnings


def _unquote(value: str) -> str:
    value = value.strip()
    if len(value) >= 2 and value[0] == value[-1] and value[0] in "'\"":
        return value[1:-1]
    return value


def _strip_comment(value: str) -> str:
    value = value.strip()
    if value and value[0] in "'\"":
        end = value.find(value[0], 1)
        return value[: end + 1] if end > 0 else value
    return re.sub(r"\s+#.*$", "", value)


def find_placeholders(text: str, tokens: Sequence[str]) -> List[PlaceholderHit]:
    hits: List[PlaceholderHit] = []
    for lineno, line in enumerate(text.splitlines(), start=1):
        for token in tokens:
            for _ in re.finditer(re.escape(token), line):
                hits.append(PlaceholderHit(lineno=lineno, token=token, line=line.strip()))
    return hits


def credential_values(text: str) -> List[str]:
    values = []
    for line in text.splitlines():
        m = _CREDENTIAL_RE.match(line)
        if m:
            values.append(_unquote(_strip_comment(m.group(2))))
    return values


def is_hashed(value: str) -> bool:
    return value.startswith(HASH_PREFIXES)


def first_value(text: str, key: str) -> Optional[str]:
    m = re.search(rf"^\s*{re.escape(key)}\s*:\s*(\S+)", text, re.MULTILINE)
    return _unquote(m.group(1)) if m else None


def has_autoinstall_key(text: str, parsed: Any) -> bool:
    if isinstance(parsed, dict):
        return "autoinstall" in parsed
    return bool(_AUTOINSTALL_RE.search(text))


def ensure_meta_data(path: Path, *, dry_run: bool = False) -> bool:
    """Create a minimal meta-data file. Returns True if one was written."""

    if path.exists():
        return False
    content = (
        f"instance-id: ubuntu-autoinstall-{int(time.time())}\n"
        "local-hostname: ubuntu-server\n"
    )
    if dry_run:
        logger.info("Would create %s", str(path))
    else:
        path.write_text(content, encoding="utf-8")
    return True


def validate_user_data(text: str, *, placeholder_tokens: Sequence[str]) -> ValidationReport:
    report = ValidationReport()

    try:
        report.parsed = yaml.safe_load(text)
    except yaml.YAMLError as e:
        report.warnings.append(f"user-data may contain YAML syntax errors: {e}")

    if not has_autoinstall_key(text, report.parsed):
        report.warnings.append("Missing top-level 'autoinstall:' section")

    report.placeholders = find_placeholders(text, placeholder_tokens)
    if report.placeholders:
        lines = ", ".join(f"line {h.lineno}: {h.line}" for h in report.placeholders)
        report.warnings.append(f"Placeholder text found, edit the configuration ({lines})")

    creds = credential_values(text)
    plain = [v for v in creds if not is_hashed(v)]
    if not creds or plain:
        report.warnings.append(
            "Password may not be hashed, generate one with: mkpasswd -m sha-512 your_password"
        )
    elif all(v.startswith(PREFERRED_HASH_PREFIX) for v in creds):
        report.notes.append("Password is hashed")
    else:
        report.notes.append("Password is hashed (not SHA-512)")

    report.hostname = first_value(text, "hostname")
    report.username = first_value(text, "username")
    return report


def validate_config_pair(
    user_data: Path,
    meta_data: Path,
    *,
    placeholder_tokens: Sequence[str],
    dry_run: bool = False,
) -> ValidationReport:
    if not user_data.exists():
        raise InstallerError(
            f"Missing user-data file: {user_data}",
            hint="Place your autoinstall user-data next to the installer image.",
        )

    try:
        text = user_data.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise InstallerError(
            f"user-data is not valid UTF-8: {e}",
            hint="Save user-data as UTF-8 text.",
        ) from e

    created = ensure_meta_data(meta_data, dry_run=dry_run)
    report = validate_user_data(text, placeholder_tokens=placeholder_tokens)
    report.meta_data_created = created
    logger.info("user-data validation: %d warning(s)", len(report.warnings))
    return report
