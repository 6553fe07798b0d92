from __future__ import annotations

from pathlib import Path
from types import TracebackType
from typing import TextIO

from ._base import CargoLinkArgsError
from .classifier import Destination


def _open_output(path: Path) -> TextIO:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        return path.open("w", encoding="utf-8", newline="\n")
    except OSError as exc:
        raise CargoLinkArgsError(f"Unable to create output file '{path}': {exc}") from exc


class LinkArgsWriter:
    """Streams classified arguments into the linker and lib link files.

    Both files are truncated on entry so that a run which routes nothing to
    one of them still leaves it empty rather than stale.
    """

    def __init__(self, linker_file: Path, lib_link_file: Path) -> None:
        self.linker_file = linker_file
        self.lib_link_file = lib_link_file
        self.linker_lines = 0
        self.lib_lines = 0
        self._linker: TextIO | None = None
        self._lib: TextIO | None = None

    def __enter__(self) -> LinkArgsWriter:
        self._linker = _open_output(self.linker_file)
        try:
            self._lib = _open_output(self.lib_link_file)
        except CargoLinkArgsError:
            self._linker.close()
            self._linker = None
            raise
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def close(self) -> None:
        errors: list[str] = []
        for handle in (self._linker, self._lib):
            if handle is None:
                continue
            try:
                handle.close()
            except OSError as exc:
                errors.append(f"'{handle.name}': {exc}")
        self._linker = None
        self._lib = None
        if errors:
            raise CargoLinkArgsError("Unable to flush output file " + " | ".join(errors))

    def write(self, destination: Destination, line: str) -> None:
        if self._linker is None or self._lib is None:
            raise CargoLinkArgsError("LinkArgsWriter used outside of its context")
        try:
            if destination in (Destination.LINKER, Destination.BOTH):
                self._linker.write(line + "\n")
                self.linker_lines += 1
            if destination in (Destination.ARCHIVER, Destination.BOTH):
                self._lib.write(line + "\n")
                self.lib_lines += 1
        except OSError as exc:
            raise CargoLinkArgsError(f"Unable to write link arguments: {exc}") from exc
