"""Login checks against a whitespace-separated user/password file."""

from __future__ import annotations

import os
import sys
from pathlib import Path


def parse_credentials(line: str) -> tuple[str, str]:
    """Return the first two words of *line* as ``(user, password)``.

    Raises ValueError when the line holds fewer than two words.
    """
    words = line.split()
    if len(words) < 2:
        raise ValueError("expected 'user password'")
    return words[0], words[1]


def _pairs(tokens: list[str]):
    it = iter(tokens)
    return zip(it, it)


def check_login(path: str | os.PathLike[str], user: str, password: str) -> bool:
    """Tell whether *user* and *password* appear as a pair in the file at *path*.

    The file holds whitespace-separated ``user password`` pairs. A missing or
    unreadable file is reported on stderr and refuses every login.
    """
    try:
        content = Path(path).read_text(encoding="utf-8", errors="surrogateescape")
    except OSError as exc:
        print(f"Khong tim thay file {os.fspath(path)}: {exc}", file=sys.stderr)
        return False
    return any(
        stored_user == user and stored_pass == password
        for stored_user, stored_pass in _pairs(content.split())
    )