"""Zip packaging of bundle outputs."""

from __future__ import annotations

from collections.abc import Sequence
import logging
from pathlib import Path
import zipfile

from mediarelay.adapters.tools.base import Archiver

logger = logging.getLogger(__name__)


class ZipArchiver(Archiver):
    def package(self, files: Sequence[Path], destination: Path) -> Path:
        destination.parent.mkdir(parents=True, exist_ok=True)
        with zipfile.ZipFile(destination, "w", compression=zipfile.ZIP_DEFLATED) as archive:
            for path in files:
                archive.write(path, arcname=path.name)
        logger.info("tools.archive_created entries=%s bytes=%s", len(files), destination.stat().st_size)
        return destination
