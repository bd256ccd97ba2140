"""Chat server where clients register as ``<id>: <name>`` before chatting."""

from __future__ import annotations

import abc
import argparse
import selectors
import socket
import sys
from dataclasses import dataclass
from typing import Any, Callable, Hashable

from sockdemo.lines import cut_at_newline, open_listener

DEFAULT_PORT = 8080
MAX_CLIENTS = 64
RECV_SIZE = 1023

WELCOME = "Vui long dang ky theo cu phap: <id>: <name>\n"
REGISTERED = "Dang ky thanh cong!\n"
NAME_HAS_SPACES = "Loi: client_name phai viet lien (khong co dau cach). Nhap lai:\n"
BAD_SYNTAX = "Sai cu phap! Yeu cau: <id>: <name>. Nhap lai:\n"


@dataclass(frozen=True)
class Registration:
    """A parsed registration line."""

    client_id: str
    name: str


class RegistrationError(ValueError):
    """A registration line was rejected; ``reply`` is the text sent back."""

    def __init__(self, reply: str) -> None:
        super().__init__(reply.rstrip("\n"))
        self.reply = reply


def parse_registration(line: str) -> Registration:
    """Parse ``<id>: <name>``; the name must be a single word."""
    client_id, colon, rest = line.partition(":")
    words = rest.split()
    if not client_id or not colon or not words:
        raise RegistrationError(BAD_SYNTAX)
    if len(words) > 1:
        raise RegistrationError(NAME_HAS_SPACES)
    return Registration(client_id, words[0])


def format_message(client_id: str, text: str) -> str:
    """Format a chat line as relayed to the other clients."""
    return f"{client_id}: {text}\n"


def _encode(text: str) -> bytes:
    return text.encode("utf-8", "surrogateescape")


def _decode(data: bytes) -> str:
    return data.split(b"\0", 1)[0].decode("utf-8", "surrogateescape")


Outgoing = list[tuple[Hashable, bytes]]


class _LineServer(abc.ABC):
    """Listening socket plus a selector loop that feeds each received line to ``handle_line``."""

    _welcome = ""
    _wait_name = "select"
    _announce_connections = False
    _announce_disconnects = False
    _full_notice: str | None = None
    _recv_size = RECV_SIZE
    _to_line = staticmethod(cut_at_newline)

    def __init__(
        self, host: str, port: int, max_clients: int, reuse_address: bool = False
    ) -> None:
        self.max_clients = max_clients
        self._listener = open_listener(host, port, reuse_address=reuse_address)
        self.address = self._listener.getsockname()
        self._clients: dict[Hashable, Any] = {}

    def __enter__(self):
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    @abc.abstractmethod
    def _new_state(self, client: Hashable) -> Any:
        """Return the initial state for a newly seen client."""

    @abc.abstractmethod
    def handle_line(self, client: Hashable, line: str) -> Outgoing:
        """Process one line from *client*; return the (recipient, payload) pairs to send."""

    def _state(self, client: Hashable) -> Any:
        state = self._clients.get(client)
        if state is None:
            state = self._clients[client] = self._new_state(client)
        return state

    def serve_forever(self) -> None:
        """Accept clients and handle their lines until waiting for input fails."""
        with selectors.DefaultSelector() as selector:
            selector.register(self._listener, selectors.EVENT_READ)
            while True:
                try:
                    events = selector.select()
                except OSError as exc:
                    print(f"{self._wait_name}() failed: {exc}", file=sys.stderr)
                    break
                for key, _ in events:
                    if key.fileobj is self._listener:
                        self._accept(selector)
                    else:
                        self._receive(selector, key.fileobj)

    def close(self) -> None:
        """Close every client connection and the listening socket."""
        for client in list(self._clients):
            if isinstance(client, socket.socket):
                client.close()
        self._clients.clear()
        self._listener.close()

    def _accept(self, selector: selectors.BaseSelector) -> None:
        try:
            conn, _ = self._listener.accept()
        except OSError:
            return
        if self._announce_connections:
            print(f"New connection: {conn.fileno()}", flush=True)
        if len(self._clients) >= self.max_clients:
            if self._full_notice is not None:
                print(self._full_notice, flush=True)
            conn.close()
            return
        self._state(conn)
        selector.register(conn, selectors.EVENT_READ)
        self._send(conn, _encode(self._welcome))

    def _receive(self, selector: selectors.BaseSelector, conn: socket.socket) -> None:
        try:
            data = conn.recv(self._recv_size)
        except OSError:
            data = b""
        if not data:
            if self._announce_disconnects:
                print(f"Client {conn.fileno()} disconnected", flush=True)
            selector.unregister(conn)
            self._clients.pop(conn, None)
            conn.close()
            return
        line = self._to_line(_decode(data))
        for target, payload in self.handle_line(conn, line):
            self._send(target, payload)

    @staticmethod
    def _send(target: socket.socket, payload: bytes) -> None:
        try:
            target.sendall(payload)
        except OSError:
            pass


def _arguments(description: str) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=description)
    parser.add_argument("--host", default="")
    parser.add_argument("--port", type=int, default=DEFAULT_PORT)
    return parser


def _run(create: Callable[[], _LineServer], banner: str) -> int:
    """Create a server, announce it and serve until interrupted."""
    try:
        server = create()
    except OSError as exc:
        print(f"bind() failed: {exc}", file=sys.stderr)
        return 1
    with server:
        print(banner, flush=True)
        try:
            server.serve_forever()
        except KeyboardInterrupt:
            pass
    return 0


@dataclass
class _Client:
    client_id: str | None = None


class ChatServer(_LineServer):
    """Relays each registered client's lines to every other registered client."""

    _welcome = WELCOME

    def __init__(
        self, host: str = "", port: int = DEFAULT_PORT, max_clients: int = MAX_CLIENTS
    ) -> None:
        super().__init__(host, port, max_clients)

    def _new_state(self, client: Hashable) -> _Client:
        return _Client()

    def handle_line(self, client: Hashable, line: str) -> Outgoing:
        """Process one line from *client*; return the (recipient, payload) pairs to send."""
        state = self._state(client)
        if state.client_id is None:
            try:
                registration = parse_registration(line)
            except RegistrationError as exc:
                return [(client, _encode(exc.reply))]
            state.client_id = registration.client_id
            return [(client, _encode(REGISTERED))]
        payload = _encode(format_message(state.client_id, line))
        return [
            (other, payload)
            for other, peer in self._clients.items()
            if other != client and peer.client_id is not None
        ]

    def serve_forever(self) -> None:
        """Accept clients and relay their lines until waiting for input fails."""
        super().serve_forever()

    def close(self) -> None:
        """Close every client connection and the listening socket."""
        super().close()


def main(argv: list[str] | None = None) -> int:
    """Run the registration chat server."""
    args = _arguments("Chat server with client registration.").parse_args(argv)
    return _run(
        lambda: ChatServer(args.host, args.port),
        f"Server is listening on port {args.port}...",
    )


if __name__ == "__main__":
    sys.exit(main())