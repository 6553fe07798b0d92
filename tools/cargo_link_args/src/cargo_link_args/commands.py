from __future__ import annotations

import argparse
import sys
from pathlib import Path

from ._base import ConfigError, ToolInvocationError
from .bindings import generate_header, write_if_changed
from .cargo import run_cargo_rustc
from .config import LinkArgsConfig, load_config
from .link_args import extract_link_line, split_link_line
from .sources import iter_crate_source_files


def config_from_args(args: argparse.Namespace) -> LinkArgsConfig:
    config_path = getattr(args, "config", None)
    return load_config(Path(config_path).resolve() if config_path else None)


def normalize_cargo_args(values: list[str] | None) -> list[str]:
    cargo_args = list(values or [])
    if cargo_args and cargo_args[0] == "--":
        cargo_args = cargo_args[1:]
    return cargo_args


def command_rustc(args: argparse.Namespace) -> int:
    config = config_from_args(args)
    linker_file = Path(args.output_linker_file)
    lib_link_file = Path(args.output_lib_link_file)
    cargo_args = normalize_cargo_args(args.cargo_args)
    if not cargo_args:
        raise ConfigError("No cargo args provided. Pass them after '--'.")

    print(f"Cargo args {', '.join(cargo_args)}", file=sys.stderr)
    print(f"env args {', '.join(sys.argv)}", file=sys.stderr)

    proc = run_cargo_rustc(cargo_args, config)
    print(proc.stderr)
    if proc.returncode != 0:
        raise ToolInvocationError(f"cargo rustc failed with exit code {proc.returncode}")

    link_line = extract_link_line(proc.stdout)
    if link_line is None:
        print("No linker arguments found.")
        return 0

    result = split_link_line(link_line, linker_file, lib_link_file, config)
    def_note = "no def file"
    if result.def_file is not None:
        def_note = f"def file {result.def_file}" + ("" if result.def_copied else " (source missing, not copied)")
    print(
        f"Wrote {result.linker_lines} linker args to {linker_file} and "
        f"{result.lib_lines} lib args to {lib_link_file} ({def_note}).",
        file=sys.stderr,
    )
    return 0


def command_gen_bindings(args: argparse.Namespace) -> int:
    config = config_from_args(args)
    header_path = Path(args.output_header_file)
    content = generate_header(Path(args.crate_dir), config)

    status, diff = write_if_changed(header_path, content, check=args.check, dry_run=args.dry_run)
    if status == "drift":
        if diff:
            print(diff)
        print(f"Header is out of date: {header_path}", file=sys.stderr)
        return 1
    if status == "would_write":
        if diff:
            print(diff)
        return 0
    if status == "updated":
        print("Header changed")
    return 0


def command_source_files(args: argparse.Namespace) -> int:
    config = config_from_args(args)
    for path in iter_crate_source_files(Path(args.crate_dir), config):
        print(path)
    return 0
