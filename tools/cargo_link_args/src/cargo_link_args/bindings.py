from __future__ import annotations

import difflib
import shlex
import subprocess
from pathlib import Path

from ._base import CargoLinkArgsError, ToolInvocationError
from .config import LinkArgsConfig


def generate_header(crate_dir: Path, config: LinkArgsConfig) -> str:
    # cbindgen reads <crate_dir>/cbindgen.toml on its own when present.
    command = [config.cbindgen, str(crate_dir)]
    try:
        proc = subprocess.run(command, capture_output=True, text=True, encoding="utf-8", errors="replace", check=True)
    except OSError as exc:
        raise ToolInvocationError(
            f"Couldn't generate headers: unable to run {' '.join(shlex.quote(item) for item in command)}: {exc}"
        ) from exc
    except subprocess.CalledProcessError as exc:
        raise ToolInvocationError(
            f"Couldn't generate headers: cbindgen exited with code {exc.returncode}",
            output=exc.stderr or exc.stdout or "",
        ) from exc
    return proc.stdout


def compute_unified_diff(old_content: str, new_content: str, path: Path) -> str:
    diff_lines = difflib.unified_diff(
        old_content.splitlines(),
        new_content.splitlines(),
        fromfile=f"a/{path}",
        tofile=f"b/{path}",
        lineterm="",
    )
    return "\n".join(diff_lines)


def write_if_changed(path: Path, content: str, check: bool, dry_run: bool) -> tuple[str, str]:
    """Write ``content`` to ``path`` unless it is already there.

    Returns a status (``unchanged``, ``drift``, ``would_write`` or
    ``updated``) and the unified diff between the old and new content.
    """
    try:
        existing = path.read_text(encoding="utf-8") if path.exists() else ""
    except OSError as exc:
        raise CargoLinkArgsError(f"Unable to read header '{path}': {exc}") from exc
    if existing == content and path.exists():
        return "unchanged", ""
    diff = compute_unified_diff(existing, content, path)
    if check:
        return "drift", diff
    if dry_run:
        return "would_write", diff
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    except OSError as exc:
        raise CargoLinkArgsError(f"Unable to write header '{path}': {exc}") from exc
    return "updated", diff
