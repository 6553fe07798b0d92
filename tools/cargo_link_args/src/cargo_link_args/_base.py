from __future__ import annotations

import json
from pathlib import Path
from typing import Any

TOOL_VERSION = "0.1.0"


class CargoLinkArgsError(Exception):
    pass


class FrontEndError(CargoLinkArgsError):
    pass


class ConfigError(CargoLinkArgsError):
    pass


class ToolInvocationError(CargoLinkArgsError):
    def __init__(self, message: str, output: str = "") -> None:
        super().__init__(message)
        self.output = output


def load_json(path: Path) -> Any:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise ConfigError(f"Unable to read JSON file '{path}': {exc}") from exc
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Invalid JSON in '{path}': {exc}") from exc
