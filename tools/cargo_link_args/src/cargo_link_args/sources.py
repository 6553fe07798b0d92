from __future__ import annotations

import json
import shlex
import subprocess
from pathlib import Path
from typing import Any, Iterator

from ._base import ToolInvocationError
from .config import LinkArgsConfig

LIBRARY_TARGET_KINDS = {"lib", "rlib", "dylib", "cdylib", "staticlib", "proc-macro"}


def load_cargo_metadata(crate_dir: Path, config: LinkArgsConfig) -> dict[str, Any]:
    command = [
        config.cargo,
        "metadata",
        "--format-version",
        "1",
        "--manifest-path",
        str(crate_dir / "Cargo.toml"),
    ]
    try:
        proc = subprocess.run(command, capture_output=True, text=True, encoding="utf-8", errors="replace", check=True)
    except OSError as exc:
        raise ToolInvocationError(
            f"Unable to run {' '.join(shlex.quote(item) for item in command)}: {exc}"
        ) from exc
    except subprocess.CalledProcessError as exc:
        raise ToolInvocationError(
            f"cargo metadata exited with code {exc.returncode}",
            output=exc.stderr or "",
        ) from exc

    try:
        payload = json.loads(proc.stdout)
    except json.JSONDecodeError as exc:
        raise ToolInvocationError(f"cargo metadata produced invalid JSON: {exc}") from exc
    if not isinstance(payload, dict) or not isinstance(payload.get("packages"), list):
        raise ToolInvocationError("cargo metadata output is missing the 'packages' array.")
    return payload


def library_source_dirs(metadata: dict[str, Any]) -> list[Path]:
    """Directories holding the library sources of every local package."""
    dirs: list[Path] = []
    for package in metadata.get("packages", []):
        if not isinstance(package, dict) or package.get("source") is not None:
            continue
        for target in package.get("targets", []):
            kinds = set(target.get("kind", []))
            src_path = target.get("src_path")
            if not kinds & LIBRARY_TARGET_KINDS or not isinstance(src_path, str):
                continue
            dirs.append(Path(src_path).parent)
    return dirs


def iter_source_files(directory: Path) -> Iterator[Path]:
    if not directory.is_dir():
        return
    for path in sorted(directory.rglob("*")):
        if path.is_file():
            yield path


def iter_crate_source_files(crate_dir: Path, config: LinkArgsConfig) -> Iterator[Path]:
    metadata = load_cargo_metadata(crate_dir, config)
    for directory in library_source_dirs(metadata):
        yield from iter_source_files(directory)
