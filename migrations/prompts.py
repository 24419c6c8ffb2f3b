from __future__ import annotations

from typing import Callable

BACKUP_MESSAGE = (
    "Before doing this migration, make sure you have a backup handy.\n"
    '  "sanity dataset export <dataset> <somefile.ndjson>" is an easy way to do this.\n\n'
    'Would you like to perform the "{migration}" migration on dataset "{dataset}"?'
)


def confirm(message: str, read: Callable[[str], str] = input) -> bool:
    """Yes/no question defaulting to no; a closed stdin also counts as no."""
    try:
        answer = read(f"{message} (y/N): ").strip().lower()
    except (EOFError, KeyboardInterrupt):
        print()
        return False
    return answer in ("y", "yes")


def confirm_backup(
    migration: str, dataset: str, read: Callable[[str], str] = input
) -> bool:
    return confirm(BACKUP_MESSAGE.format(migration=migration, dataset=dataset), read)


def confirm_summary(summary: str, read: Callable[[str], str] = input) -> bool:
    message = (
        f"The following operations will be performed:\n\n{summary}\n\n"
        "Would you like to continue?"
    )
    return confirm(message, read)
