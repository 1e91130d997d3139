from __future__ import annotations

from typing import Optional, Sequence


class InstallerError(RuntimeError):
    """A hard error: the run stops and exits non-zero."""

    def __init__(self, message: str, *, hint: Optional[str] = None, step: Optional[str] = None) -> None:
        super().__init__(message)
        self.hint = hint
        self.step = step


class CommandError(InstallerError):
    def __init__(
        self,
        argv: Sequence[str],
        returncode: int,
        stderr: str = "",
        *,
        hint: Optional[str] = None,
    ) -> None:
        self.argv = list(argv)
        self.returncode = returncode
        self.stderr = stderr
        msg = f"Command failed ({returncode}): {' '.join(self.argv)}"
        if stderr.strip():
            msg += f"\n{stderr.strip()}"
        super().__init__(msg, hint=hint)


class Cancelled(Exception):
    """The operator declined to continue. Not an error."""
