from __future__ import annotations

from ..context import RunContext
from ..lib import console

INSTRUCTIONS = [
    ("ok", "==========================================="),
    ("ok", "  USB installer created successfully!"),
    ("ok", "==========================================="),
    ("blank", ""),
    ("log", "How to use it:"),
    ("info", "1. Plug the USB stick into the target machine"),
    ("info", "2. Enter the BIOS/UEFI setup"),
    ("info", "3. Make USB the first boot device"),
    ("info", "4. Save and reboot"),
    ("blank", ""),
    ("log", "GRUB menu entries:"),
    ("info", "* Autoinstall - unattended install (recommended)"),
    ("info", "* Autoinstall (Debug) - show detailed output"),
    ("info", "* Autoinstall (Safe Graphics) - for display problems"),
    ("info", "* Manual - interactive installer"),
    ("blank", ""),
    ("warn", "Important:"),
    ("info", "* Installation takes about 10-20 minutes"),
    ("info", "* The machine reboots by itself when done"),
    ("info", "* Log in with the username and password from user-data"),
    ("blank", ""),
    ("log", "If the installation fails:"),
    ("info", "* Boot the Debug entry to see detailed logs"),
    ("info", "* Check the user-data configuration"),
    ("info", "* Make sure the target machine has network access if packages are downloaded"),
]


class ShowInstructionsStep:
    step_id = "90_show_instructions"
    title = "Instructions"

    def run(self, ctx: RunContext) -> RunContext:
        console.plain()
        for kind, text in INSTRUCTIONS:
            if kind == "blank":
                console.plain()
            else:
                getattr(console, kind)(text)
        return ctx
