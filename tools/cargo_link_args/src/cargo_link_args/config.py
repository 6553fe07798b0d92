from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import jsonschema

from ._base import ConfigError, load_json

DEFAULT_LINKER_FRONT_ENDS = ("link.exe", "lld-link.exe", "rust-lld.exe")
DEFAULT_FORWARDED_OPTIONS = ("LIBPATH", "IMPLIB")
DEFAULT_ARCHIVE_MEMBER_SUFFIXES = (".o", ".rlib")
DEFAULT_DEF_FILE_NAME = "build_def.def"


@dataclass(frozen=True)
class LinkArgsConfig:
    linker_front_ends: tuple[str, ...] = DEFAULT_LINKER_FRONT_ENDS
    forwarded_options: tuple[str, ...] = DEFAULT_FORWARDED_OPTIONS
    archive_member_suffixes: tuple[str, ...] = DEFAULT_ARCHIVE_MEMBER_SUFFIXES
    def_file_name: str = DEFAULT_DEF_FILE_NAME
    cargo: str = "cargo"
    cbindgen: str = "cbindgen"

    def as_dict(self) -> dict[str, Any]:
        return {
            "linker_front_ends": list(self.linker_front_ends),
            "forwarded_options": list(self.forwarded_options),
            "archive_member_suffixes": list(self.archive_member_suffixes),
            "def_file_name": self.def_file_name,
            "cargo": self.cargo,
            "cbindgen": self.cbindgen,
        }


def get_schema_path() -> Path:
    return Path(__file__).resolve().parent / "schemas" / "config.schema.json"


def validate_config_payload(payload: Any, label: str) -> None:
    schema_payload = load_json(get_schema_path())
    try:
        jsonschema.validate(payload, schema_payload)
    except jsonschema.ValidationError as exc:
        location = "/".join(str(part) for part in exc.absolute_path) or "<root>"
        raise ConfigError(f"{label} failed JSON schema validation at {location}: {exc.message}") from exc


def config_from_payload(payload: dict[str, Any]) -> LinkArgsConfig:
    defaults = LinkArgsConfig()
    return LinkArgsConfig(
        linker_front_ends=tuple(payload.get("linker_front_ends", defaults.linker_front_ends)),
        forwarded_options=tuple(payload.get("forwarded_options", defaults.forwarded_options)),
        archive_member_suffixes=tuple(payload.get("archive_member_suffixes", defaults.archive_member_suffixes)),
        def_file_name=payload.get("def_file_name", defaults.def_file_name),
        cargo=payload.get("cargo", defaults.cargo),
        cbindgen=payload.get("cbindgen", defaults.cbindgen),
    )


def load_config(path: Path | None) -> LinkArgsConfig:
    if path is None:
        return LinkArgsConfig()
    payload = load_json(path)
    validate_config_payload(payload, f"Config '{path}'")
    return config_from_payload(payload)
