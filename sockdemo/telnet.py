"""Remote command server: clients log in with ``user pass`` and then run shell commands."""

from __future__ import annotations

import itertools
import os
import socket
import subprocess
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Hashable

from sockdemo.auth import check_login, parse_credentials
from sockdemo.chat_select import Outgoing, _arguments, _encode, _LineServer, _run
from sockdemo.lines import strip_trailing_newline

DEFAULT_PORT = 8080
DEFAULT_DATABASE = "databases.txt"
MAX_CLIENTS = 1023
RECV_SIZE = 255

WELCOME = "Hay gui user pass de dang nhap:\n"
LOGGED_IN = "Dang nhap thanh cong. Nhap lenh:\n"
LOGIN_FAILED = "Sai tai khoan. Nhap lai:\n"
DONE = "\nDone.\n"
SERVER_FULL = "Server full."


def run_command(
    command: str, output_path: str | os.PathLike[str], remove_output: bool = True
) -> bytes:
    """Run *command* in the shell with stdout and stderr sent to *output_path*.

    Returns the captured output, or empty bytes when the file was not produced.
    The file is deleted afterwards when *remove_output* is true.
    """
    subprocess.run(f"{command} > {os.fspath(output_path)} 2>&1", shell=True, check=False)
    path = Path(output_path)
    try:
        output = path.read_bytes()
    except OSError:
        return b""
    if remove_output:
        path.unlink(missing_ok=True)
    return output


@dataclass
class _Client:
    output_path: str
    logged_in: bool = False


class TelnetServer(_LineServer):
    """Authenticates clients against a user file and runs their commands."""

    _welcome = WELCOME
    _wait_name = "poll"
    _announce_connections = True
    _announce_disconnects = True
    _full_notice = SERVER_FULL
    _recv_size = RECV_SIZE
    _to_line = staticmethod(strip_trailing_newline)

    def __init__(
        self,
        host: str = "",
        port: int = DEFAULT_PORT,
        database: str | os.PathLike[str] = DEFAULT_DATABASE,
        max_clients: int = MAX_CLIENTS,
        remove_output: bool = True,
    ) -> None:
        super().__init__(host, port, max_clients, reuse_address=True)
        self.database = database
        self.remove_output = remove_output
        self._numbers = itertools.count(1)

    def _new_state(self, client: Hashable) -> _Client:
        number = client.fileno() if isinstance(client, socket.socket) else next(self._numbers)
        return _Client(output_path=f"out_{number}.txt")

    def handle_line(self, client: Hashable, line: str) -> Outgoing:
        """Process one line from *client*; return the (recipient, payload) pairs to send."""
        state = self._state(client)
        if not state.logged_in:
            try:
                user, password = parse_credentials(line)
            except ValueError:
                return [(client, _encode(LOGIN_FAILED))]
            if not check_login(self.database, user, password):
                return [(client, _encode(LOGIN_FAILED))]
            state.logged_in = True
            return [(client, _encode(LOGGED_IN))]
        output = run_command(line, state.output_path, self.remove_output)
        return [(client, output + _encode(DONE))]

    def serve_forever(self) -> None:
        """Accept clients and handle their logins and commands until waiting for input fails."""
        super().serve_forever()

    def close(self) -> None:
        """Close every client connection and the listening socket."""
        super().close()


def main(argv: list[str] | None = None) -> int:
    """Run the remote command server."""
    parser = _arguments("Remote command server with login.")
    parser.add_argument("--database", default=DEFAULT_DATABASE)
    parser.add_argument(
        "--keep-output",
        action="store_true",
        help="keep the per-client output files after sending them",
    )
    args = parser.parse_args(argv)
    return _run(
        lambda: TelnetServer(
            args.host, args.port, args.database, remove_output=not args.keep_output
        ),
        f"Telnet Server is listening on port {args.port}...",
    )


if __name__ == "__main__":
    sys.exit(main())