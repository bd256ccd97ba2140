"""Line handling and listening-socket helpers shared by the servers."""

from __future__ import annotations

import re
import socket

_LINE_BREAK = re.compile(r"[\r\n]")


def cut_at_newline(data: str) -> str:
    """Return *data* up to, not including, its first carriage return or line feed."""
    return _LINE_BREAK.split(data, maxsplit=1)[0]


def strip_trailing_newline(data: str) -> str:
    """Drop one trailing line feed or, failing that, one trailing carriage return."""
    if data.endswith("\n") or data.endswith("\r"):
        return data[:-1]
    return data


def open_listener(
    host: str = "",
    port: int = 8080,
    backlog: int = 5,
    reuse_address: bool = False,
) -> socket.socket:
    """Create a TCP socket bound to *host*:*port* and listening.

    Raises OSError when the socket cannot be bound or put into listening mode.
    """
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM, socket.IPPROTO_TCP)
    try:
        if reuse_address:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        sock.bind((host, port))
        sock.listen(backlog)
    except OSError:
        sock.close()
        raise
    return sock