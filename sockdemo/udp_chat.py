"""Two-way chat over UDP between a local port and a fixed peer."""

from __future__ import annotations

import selectors
import socket
import sys
from typing import Sequence, TextIO

RECV_SIZE = 1023
USAGE = "Usage: udp_chat <port_s> <ip_d> <port_d>"
PROMPT = "You: "


def parse_args(argv: Sequence[str]) -> tuple[int, str, int]:
    """Return ``(source_port, dest_host, dest_port)`` from exactly three arguments.

    Raises ValueError with the usage text when the arguments do not fit.
    """
    if len(argv) != 3:
        raise ValueError(USAGE)
    source, dest_host, dest = argv
    try:
        return int(source), dest_host, int(dest)
    except ValueError:
        raise ValueError(USAGE) from None


class UdpChat:
    """A non-blocking UDP socket bound locally and aimed at one peer."""

    def __init__(self, source_port: int, dest_host: str, dest_port: int) -> None:
        self._sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        try:
            self._sock.bind(("", source_port))
            self._sock.setblocking(False)
        except OSError:
            self._sock.close()
            raise
        self.address = self._sock.getsockname()
        self.destination = (dest_host, dest_port)

    def __enter__(self) -> UdpChat:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def send(self, text: str) -> None:
        """Send *text* as one datagram to the peer."""
        self._sock.sendto(text.encode("utf-8", "surrogateescape"), self.destination)

    def receive(self) -> str | None:
        """Return the text of one waiting datagram, or None when none has arrived."""
        try:
            data, _ = self._sock.recvfrom(RECV_SIZE)
        except BlockingIOError:
            return None
        return data.split(b"\0", 1)[0].decode("utf-8", "surrogateescape")

    def run(self, stdin: TextIO, stdout: TextIO) -> None:
        """Relay lines from *stdin* to the peer and show incoming messages on *stdout*.

        Returns when *stdin* reaches end of input or receiving fails.
        """
        with selectors.DefaultSelector() as selector:
            selector.register(self._sock, selectors.EVENT_READ, "socket")
            selector.register(stdin, selectors.EVENT_READ, "stdin")
            while True:
                ready = {key.data for key, _ in selector.select()}
                if "socket" in ready:
                    try:
                        message = self.receive()
                    except OSError as exc:
                        print(f"recvfrom error: {exc}", file=sys.stderr)
                        return
                    if message is not None:
                        stdout.write(f"\rReceived: {message}")
                        stdout.write(PROMPT)
                        stdout.flush()
                if "stdin" in ready:
                    line = stdin.readline()
                    if not line:
                        return
                    self.send(line)
                    stdout.write(PROMPT)
                    stdout.flush()

    def close(self) -> None:
        """Close the socket."""
        self._sock.close()


def main(argv: Sequence[str] | None = None) -> int:
    """Run the chat between a local port and a peer given on the command line."""
    if argv is None:
        argv = sys.argv[1:]
    try:
        source_port, dest_host, dest_port = parse_args(argv)
    except ValueError as exc:
        print(exc)
        return 1
    try:
        chat = UdpChat(source_port, dest_host, dest_port)
    except OSError as exc:
        print(f"bind() failed: {exc}", file=sys.stderr)
        return 1
    with chat:
        print("UDP Non-blocking Chat started...", flush=True)
        try:
            chat.run(sys.stdin, sys.stdout)
        except KeyboardInterrupt:
            pass
    return 0


if __name__ == "__main__":
    sys.exit(main())