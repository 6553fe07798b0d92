from __future__ import annotations

import argparse
import sys

from ._base import TOOL_VERSION, CargoLinkArgsError
from .commands import command_gen_bindings, command_rustc, command_source_files


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cargo_link_args",
        description="Runs cargo and cbindgen on a crate and splits its link line into linker and lib.exe argument files.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {TOOL_VERSION}")
    parser.add_argument("--config", help="Path to cargo_link_args config JSON (applies to every command).")

    sub = parser.add_subparsers(dest="command", required=True)

    gen_bindings = sub.add_parser("gen-bindings", help="Generate a C header for the crate using cbindgen.")
    gen_bindings.add_argument(
        "--crate-dir",
        "--crate_dir",
        dest="crate_dir",
        required=True,
        help="Input crate directory.",
    )
    gen_bindings.add_argument(
        "--output-header-file",
        "--output_header_file",
        dest="output_header_file",
        required=True,
        help="Destination filename for the generated C header.",
    )
    gen_bindings.add_argument("--check", action="store_true", help="Fail with a diff instead of rewriting a stale header.")
    gen_bindings.add_argument("--dry-run", action="store_true", help="Print the diff without writing the header.")
    gen_bindings.set_defaults(func=command_gen_bindings)

    rustc = sub.add_parser("rustc", help="Compile the crate and write linker/lib argument files.")
    rustc.add_argument(
        "--output-linker-file",
        "--output_linker_file",
        dest="output_linker_file",
        required=True,
        help="Path to write linker (link.exe) args to.",
    )
    rustc.add_argument(
        "--output-lib-link-file",
        "--output_lib_link_file",
        dest="output_lib_link_file",
        required=True,
        help="Path to write library linker (lib.exe) args to.",
    )
    rustc.add_argument(
        "cargo_args",
        nargs=argparse.REMAINDER,
        help="Arguments to 'cargo rustc', given after '--'.",
    )
    rustc.set_defaults(func=command_rustc)

    source_files = sub.add_parser("source-files", help="List all source files required to compile the crate.")
    source_files.add_argument(
        "--crate-dir",
        "--crate_dir",
        dest="crate_dir",
        required=True,
        help="Input crate directory.",
    )
    source_files.set_defaults(func=command_source_files)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        return int(args.func(args))
    except CargoLinkArgsError as exc:
        output = getattr(exc, "output", "")
        if output:
            print(output.rstrip(), file=sys.stderr)
        print(f"cargo_link_args error: {exc}", file=sys.stderr)
        return 1

