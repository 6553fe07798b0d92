from __future__ import annotations

import os
import random
import shlex
import subprocess
from typing import Sequence

from ._base import ToolInvocationError
from .config import LinkArgsConfig

# --print link-args needs the unstable flag; save-temps keeps the DEF file
# around long enough for it to be copied.
LINK_ARGS_FLAGS = ("--print", "link-args", "-Z", "unstable-options", "-C", "save-temps")


def version_link_arg(value: int | None = None) -> str:
    # A fresh /VERSION forces rustc to relink, so the link line is always printed.
    if value is None:
        value = random.randint(0, 0xFFFF)
    return f"-Clink-arg=/VERSION:{value}"


def build_rustc_command(cargo_args: Sequence[str], config: LinkArgsConfig, version: int | None = None) -> list[str]:
    return [config.cargo, "rustc", *cargo_args, *LINK_ARGS_FLAGS, version_link_arg(version)]


def run_cargo_rustc(cargo_args: Sequence[str], config: LinkArgsConfig) -> subprocess.CompletedProcess[str]:
    command = build_rustc_command(cargo_args, config)
    env = dict(os.environ)
    env["CARGO_INCREMENTAL"] = "1"
    try:
        proc = subprocess.run(command, capture_output=True, text=True, encoding="utf-8", errors="replace", env=env)
    except OSError as exc:
        raise ToolInvocationError(
            f"Compile error: unable to run {' '.join(shlex.quote(item) for item in command)}: {exc}"
        ) from exc
    return proc
