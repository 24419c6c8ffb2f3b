from __future__ import annotations

from typing import Iterable, Union


def serialize_path(path: Iterable[Union[str, int]]) -> str:
    """
    Render a key path in the patch API's path syntax: `.` between keys and
    `[n]` for list indices, e.g. ("body", 0, "_type") -> "body[0]._type".
    """
    out = ""
    for i, part in enumerate(path):
        if isinstance(part, int) and not isinstance(part, bool):
            out += f"[{part}]"
        else:
            out += part if i == 0 else f".{part}"
    return out
