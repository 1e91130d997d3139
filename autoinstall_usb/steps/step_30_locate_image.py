from __future__ import annotations

import logging

from ..context import RunContext
from ..lib import console
from ..lib.image import locate_image

logger = logging.getLogger(__name__)


class LocateImageStep:
    step_id = "30_locate_image"
    title = "Image lookup"

    def run(self, ctx: RunContext) -> RunContext:
        s = ctx.config.settings
        console.log("Looking for the Ubuntu Server image...")

        image = locate_image(
            ctx.config.base_dir,
            patterns=s.image_patterns,
            fallback_patterns=s.image_fallback_patterns,
            download_hint=s.download_hint,
        )
        if image.server:
            console.ok(f"Found Server image: {image.name}")
        else:
            console.warn(f"Found {image.name}, which may not be a Server image; the Server image is recommended")

        console.info(f"Image size: {image.size_mib}MB")
        if image.size_mib > s.fat32_warn_mib:
            console.warn("Image is larger than 4GB; files over 4GB do not fit on FAT32")

        ctx.image = image
        return ctx
