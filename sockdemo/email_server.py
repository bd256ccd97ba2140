"""Server that asks each client for a full name and student ID, then replies with an e-mail address."""

from __future__ import annotations

import enum
import sys
from dataclasses import dataclass
from typing import Hashable

from sockdemo.chat_select import Outgoing, _arguments, _encode, _LineServer, _run

DEFAULT_PORT = 8080
MAX_CLIENTS = 64
RECV_SIZE = 255
MAX_WORDS = 15
EMAIL_DOMAIN = "example.com"

ASK_NAME = "1. Nhap Ho va Ten (khong dau): "
ASK_ID = "2. Nhap MSSV: "
RESULT_PREFIX = "=> Email cua ban: "
ASK_AGAIN = "Nhap ten moi de lam lai: "


def generate_email(name: str, student_id: str) -> str:
    """Build an address from the last word of *name*, the initials of the others and *student_id*.

    Words are separated by spaces; at most the first fifteen are used. The first
    two characters of *student_id* are dropped. An empty name gives an empty string.
    """
    words = [word for word in name.split(" ") if word][:MAX_WORDS]
    if not words:
        return ""
    first_name = words[-1].lower()
    initials = "".join(word[0].lower() for word in words[:-1])
    return f"{first_name}.{initials}{student_id[2:]}@{EMAIL_DOMAIN}"


class _Stage(enum.Enum):
    NAME = enum.auto()
    STUDENT_ID = enum.auto()


@dataclass
class _Client:
    stage: _Stage = _Stage.NAME
    name: str = ""


class EmailServer(_LineServer):
    """Walks each client through name and student ID prompts and answers with an address."""

    _welcome = ASK_NAME
    _announce_connections = True
    _recv_size = RECV_SIZE

    def __init__(
        self, host: str = "", port: int = DEFAULT_PORT, max_clients: int = MAX_CLIENTS
    ) -> None:
        super().__init__(host, port, max_clients, reuse_address=True)

    def _new_state(self, client: Hashable) -> _Client:
        return _Client()

    def handle_line(self, client: Hashable, line: str) -> Outgoing:
        """Process one line from *client*; return the (recipient, payload) pairs to send."""
        state = self._state(client)
        if state.stage is _Stage.NAME:
            state.name = line
            state.stage = _Stage.STUDENT_ID
            return [(client, _encode(ASK_ID))]
        email = generate_email(state.name, line)
        state.stage = _Stage.NAME
        return [(client, _encode(f"{RESULT_PREFIX}{email}\n{ASK_AGAIN}"))]

    def serve_forever(self) -> None:
        """Accept clients and answer their prompts until waiting for input fails."""
        super().serve_forever()

    def close(self) -> None:
        """Close every client connection and the listening socket."""
        super().close()


def main(argv: list[str] | None = None) -> int:
    """Run the e-mail address server."""
    args = _arguments("E-mail address generator server.").parse_args(argv)
    return _run(
        lambda: EmailServer(args.host, args.port),
        f"Email Server is running on port {args.port}...",
    )


if __name__ == "__main__":
    sys.exit(main())