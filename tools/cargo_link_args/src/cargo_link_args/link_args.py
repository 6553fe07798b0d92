from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from .classifier import classify_link_args, validate_front_end
from .config import LinkArgsConfig
from .relocator import DefFileRelocator
from .tokenizer import parse_quotes
from .writer import LinkArgsWriter

DEF_MARKER = ".def"


@dataclass(frozen=True)
class LinkArgsResult:
    front_end: str
    linker_lines: int
    lib_lines: int
    def_file: Path | None
    def_copied: bool


def extract_link_line(stdout: str) -> str | None:
    """Return the link line from cargo's stdout, or None when there is none.

    ``--print link-args`` puts the link command on the last line; it is only
    usable when it references a module-definition file.
    """
    lines = stdout.splitlines()
    if not lines:
        return None
    last_line = lines[-1]
    if DEF_MARKER not in last_line:
        return None
    return last_line


def split_link_line(
    line: str,
    linker_file: Path,
    lib_link_file: Path,
    config: LinkArgsConfig | None = None,
) -> LinkArgsResult:
    config = config or LinkArgsConfig()
    relocator = DefFileRelocator(lib_link_file, config.def_file_name)
    def_file: Path | None = None

    with LinkArgsWriter(linker_file, lib_link_file) as writer:
        args = parse_quotes(line)
        front_end = validate_front_end(args, config.linker_front_ends)

        def relocate(source: str) -> Path:
            nonlocal def_file
            def_file = relocator.relocate(source)
            return def_file

        for destination, value in classify_link_args(
            args,
            relocate,
            forwarded_options=config.forwarded_options,
            archive_member_suffixes=config.archive_member_suffixes,
        ):
            writer.write(destination, value)

    return LinkArgsResult(
        front_end=front_end,
        linker_lines=writer.linker_lines,
        lib_lines=writer.lib_lines,
        def_file=def_file,
        def_copied=relocator.copied_from is not None,
    )
