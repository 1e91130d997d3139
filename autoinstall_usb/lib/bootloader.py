from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence

logger = logging.getLogger(__name__)

KERNEL = "/casper/vmlinuz"
INITRD = "/casper/initrd"
MEMTEST = "/boot/memtest86+.bin"
# NoCloud datasource on the install medium root. GRUB needs the ';' escaped.
AUTOINSTALL_PARAMS = r"autoinstall ds=nocloud\;s=/cdrom/"


@dataclass(frozen=True)
class MenuEntry:
    title: str
    linux: str
    params: str = ""
    initrd: Optional[str] = None
    css_class: Optional[str] = "ubuntu"
    gfxpayload_keep: bool = True

    def render(self) -> str:
        head = f"menuentry '{self.title}'"
        if self.css_class:
            head += f" --class {self.css_class}"
        lines = [head + " {"]
        if self.gfxpayload_keep:
            lines.append("    set gfxpayload=keep")
        linux = f"    linux   {self.linux}"
        if self.params:
            linux += f" {self.params}"
        lines.append(linux)
        if self.initrd:
            lines.append(f"    initrd  {self.initrd}")
        lines.append("}")
        return "\n".join(lines)


def default_entries(product: str = "Ubuntu Server", version: Optional[str] = None) -> List[MenuEntry]:
    """Unattended install first; it is the entry GRUB boots on timeout."""

    name = f"{product} {version}" if version else product
    return [
        MenuEntry(f"Autoinstall {name}", KERNEL, f"{AUTOINSTALL_PARAMS} quiet splash ---", INITRD),
        MenuEntry(f"Autoinstall {product} (Debug - Show Details)", KERNEL, f"{AUTOINSTALL_PARAMS} ---", INITRD),
        MenuEntry(f"Autoinstall {product} (Safe Graphics)", KERNEL, f"{AUTOINSTALL_PARAMS} nomodeset ---", INITRD),
        MenuEntry(f"Try or Install {product} (Manual)", KERNEL, "---", INITRD),
        MenuEntry("Test memory", MEMTEST, css_class=None, gfxpayload_keep=False),
    ]


_HEADER = """\
set timeout={timeout}
set default={default}

# Always show the menu
set timeout_style=menu

if loadfont /boot/grub/font.pf2 ; then
    set gfxmode=auto
    insmod efi_gop
    insmod efi_uga
    insmod video_bochs
    insmod video_cirrus
    insmod all_video
    insmod gfxterm
    terminal_output gfxterm
fi

set menu_color_normal=cyan/blue
set menu_color_highlight=white/blue
"""


def render_grub_menu(entries: Sequence[MenuEntry], *, timeout: int = 30, default: int = 0) -> str:
    if not entries:
        raise ValueError("GRUB menu needs at least one entry")
    if not 0 <= default < len(entries):
        raise ValueError(f"default entry {default} out of range")

    parts = [_HEADER.format(timeout=timeout, default=default)]
    parts.extend(e.render() + "\n" for e in entries)
    return "\n".join(parts)
