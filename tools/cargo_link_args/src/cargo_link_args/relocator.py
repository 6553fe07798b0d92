from __future__ import annotations

import shutil
from pathlib import Path

from ._base import CargoLinkArgsError
from .config import DEFAULT_DEF_FILE_NAME


class DefFileRelocator:
    """Copies the module-definition file next to the lib link file."""

    def __init__(self, lib_link_file: Path, def_file_name: str = DEFAULT_DEF_FILE_NAME) -> None:
        self.destination = lib_link_file.with_name(def_file_name)
        self.copied_from: Path | None = None

    def __call__(self, source: str) -> Path:
        return self.relocate(source)

    def relocate(self, source: str) -> Path:
        source_path = Path(source)
        # Some toolchains emit an empty or placeholder DEF path.
        if not source or not source_path.is_file():
            return self.destination
        try:
            self.destination.parent.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(source_path, self.destination)
        except OSError as exc:
            raise CargoLinkArgsError(
                f"Failed to copy def file '{source_path}' to '{self.destination}': {exc}"
            ) from exc
        self.copied_from = source_path
        return self.destination
