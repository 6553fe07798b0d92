from __future__ import annotations


def parse_quotes(line: str) -> list[str]:
    """Split a link command line into arguments.

    Spaces separate arguments outside double quotes. Inside quotes a
    backslash takes the next character literally; outside quotes it is an
    ordinary character. Empty arguments are never produced.
    """
    args: list[str] = []
    in_string = False
    escaping = False
    current: list[str] = []

    for ch in line:
        if in_string:
            if ch == "\\" and not escaping:
                escaping = True
            elif ch == '"' and not escaping:
                if current:
                    args.append("".join(current))
                current = []
                in_string = False
            else:
                current.append(ch)
                escaping = False
        elif ch == " ":
            if current:
                args.append("".join(current))
            current = []
        elif ch == '"':
            if current:
                args.append("".join(current))
            current = []
            in_string = True
        else:
            current.append(ch)

    if current:
        args.append("".join(current))
    return args
