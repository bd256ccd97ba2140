"""Timestamped chat server where clients first announce ``client_id: client_name``."""

from __future__ import annotations

import sys
from dataclasses import dataclass
from datetime import datetime
from typing import Hashable

from sockdemo.chat_select import Outgoing, _arguments, _encode, _LineServer, _run
from sockdemo.lines import strip_trailing_newline

DEFAULT_PORT = 8080
MAX_CLIENTS = 1023
RECV_SIZE = 255

WELCOME = "Hay nhap ten theo cu phap 'client_id: client_name':\n"
BAD_SYNTAX = "Sai cu phap. Yeu cau 'client_id: client_name':\n"
SERVER_FULL = "Server da day, khong the nhan them client."


def parse_name(line: str) -> str:
    """Return the first word after the colon of ``client_id: client_name``."""
    client_id, colon, rest = line.partition(":")
    words = rest.split()
    if not client_id or not colon or not words:
        raise ValueError(BAD_SYNTAX.rstrip("\n"))
    return words[0]


def format_timestamp(moment: datetime) -> str:
    """Format *moment* the way chat lines are stamped."""
    return moment.strftime("%Y/%m/%d %I:%M:%p")


def format_message(name: str, text: str, moment: datetime | None = None) -> str:
    """Format a chat line as relayed to the other clients."""
    if moment is None:
        moment = datetime.now()
    return f"{format_timestamp(moment)} {name}: {text}\n"


@dataclass
class _Client:
    name: str | None = None


class ChatServer(_LineServer):
    """Relays each named client's lines, with a timestamp, to the other named clients."""

    _welcome = WELCOME
    _wait_name = "poll"
    _announce_connections = True
    _announce_disconnects = True
    _full_notice = SERVER_FULL
    _recv_size = RECV_SIZE
    _to_line = staticmethod(strip_trailing_newline)

    def __init__(
        self, host: str = "", port: int = DEFAULT_PORT, max_clients: int = MAX_CLIENTS
    ) -> None:
        super().__init__(host, port, max_clients, reuse_address=True)

    def _new_state(self, client: Hashable) -> _Client:
        return _Client()

    def handle_line(self, client: Hashable, line: str) -> Outgoing:
        """Process one line from *client*; return the (recipient, payload) pairs to send."""
        state = self._state(client)
        if state.name is None:
            try:
                name = parse_name(line)
            except ValueError:
                return [(client, _encode(BAD_SYNTAX))]
            state.name = name
            return [(client, _encode(f"Chao {name}! Ban co the bat dau chat.\n"))]
        payload = _encode(format_message(state.name, line))
        return [
            (other, payload)
            for other, peer in self._clients.items()
            if other != client and peer.name is not None
        ]

    def serve_forever(self) -> None:
        """Accept clients and relay their lines until waiting for input fails."""
        super().serve_forever()

    def close(self) -> None:
        """Close every client connection and the listening socket."""
        super().close()


def main(argv: list[str] | None = None) -> int:
    """Run the timestamped chat server."""
    args = _arguments("Timestamped chat server.").parse_args(argv)
    return _run(
        lambda: ChatServer(args.host, args.port),
        f"Chat Server is listening on port {args.port}...",
    )


if __name__ == "__main__":
    sys.exit(main())