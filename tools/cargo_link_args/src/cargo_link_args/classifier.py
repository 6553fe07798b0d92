from __future__ import annotations

import enum
from pathlib import Path, PureWindowsPath
from typing import Callable, Iterator, Sequence

from ._base import FrontEndError
from .config import DEFAULT_ARCHIVE_MEMBER_SUFFIXES, DEFAULT_FORWARDED_OPTIONS

FLAG_PREFIXES = ("/", "-")
FLAVOR_OPTION = "flavor"
DEF_OPTION = "DEF"
HELPER_TOOL_SUFFIX = ".exe"

Relocate = Callable[[str], Path]


class Destination(enum.Enum):
    LINKER = "linker"
    ARCHIVER = "archiver"
    BOTH = "both"


def front_end_name(token: str) -> str:
    # PureWindowsPath splits on both separators.
    return PureWindowsPath(token).name


def validate_front_end(tokens: Sequence[str], front_ends: Sequence[str]) -> str:
    if not tokens:
        raise FrontEndError("No linker args found!")
    if front_end_name(tokens[0]) not in front_ends:
        raise FrontEndError(f"Unrecognized linker flavor {tokens[0]}")
    return tokens[0]


def is_flag(token: str) -> bool:
    return token.startswith(FLAG_PREFIXES)


def split_option(token: str) -> tuple[str, str]:
    name, sep, value = token[1:].partition(":")
    return name, value if sep else ""


def format_option(name: str, value: str) -> str:
    return f'/{name}:"{value}"'


def format_quoted(value: str) -> str:
    return f'"{value}"'


def classify_link_args(
    tokens: Sequence[str],
    relocate: Relocate,
    forwarded_options: Sequence[str] = DEFAULT_FORWARDED_OPTIONS,
    archive_member_suffixes: Sequence[str] = DEFAULT_ARCHIVE_MEMBER_SUFFIXES,
) -> Iterator[tuple[Destination, str]]:
    """Route the arguments that follow the linker front end.

    Yields ``(destination, line)`` pairs in encounter order. Tokens that are
    dropped yield nothing. ``relocate`` is only called for ``DEF`` options.
    """
    suffixes = tuple(archive_member_suffixes)
    idx = 1
    while idx < len(tokens):
        token = tokens[idx]
        idx += 1

        if token.endswith(HELPER_TOOL_SUFFIX):
            continue

        if is_flag(token):
            name, value = split_option(token)
            if name == FLAVOR_OPTION:
                # value arrives as the next token
                idx += 1
            elif name == DEF_OPTION:
                yield Destination.BOTH, format_option(DEF_OPTION, str(relocate(value)))
            elif name in forwarded_options:
                yield Destination.LINKER, format_option(name, value)
            continue

        if token.endswith(suffixes):
            yield Destination.ARCHIVER, format_quoted(token)
        else:
            yield Destination.LINKER, format_quoted(token)
