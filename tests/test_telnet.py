import socket
from pathlib import Path

import pytest

from sockdemo.telnet import TelnetServer, main, run_command


@pytest.fixture
def workdir(tmp_path: Path, monkeypatch) -> Path:
    monkeypatch.chdir(tmp_path)
    (tmp_path / "databases.txt").write_text("alice password\n", encoding="utf-8")
    return tmp_path


def _server(workdir: Path, remove_output: bool = True) -> TelnetServer:
    return TelnetServer(
        "127.0.0.1", 0, workdir / "databases.txt", 4, remove_output=remove_output
    )


def test_run_command_captures_output_and_removes_file(tmp_path):
    out = tmp_path / "out_1.txt"
    assert run_command("echo hello", out, True).strip() == b"hello"
    assert not out.exists()


def test_run_command_keeps_file_when_asked(tmp_path):
    out = tmp_path / "out_2.txt"
    result = run_command("echo kept", out, remove_output=False)
    assert out.read_bytes() == result
    assert result.strip() == b"kept"


def test_login_failure_then_success(workdir):
    with _server(workdir) as server:
        assert server.handle_line("c", "alice") == [("c", b"Sai tai khoan. Nhap lai:\n")]
        assert server.handle_line("c", "alice secret") == [
            ("c", b"Sai tai khoan. Nhap lai:\n")
        ]
        assert server.handle_line("c", "alice password") == [
            ("c", b"Dang nhap thanh cong. Nhap lenh:\n")
        ]


def test_command_after_login_returns_output_and_done(workdir):
    with _server(workdir) as server:
        server.handle_line("c", "alice password")
        [(target, payload)] = server.handle_line("c", "echo hello")
        assert target == "c"
        assert payload.endswith(b"\nDone.\n")
        assert payload[: -len(b"\nDone.\n")].strip() == b"hello"
        assert list(workdir.glob("out_*.txt")) == []


def test_command_output_file_kept_without_removal(workdir):
    with _server(workdir, remove_output=False) as server:
        server.handle_line("c", "alice password")
        [(_, payload)] = server.handle_line("c", "echo kept")
        files = list(workdir.glob("out_*.txt"))
        assert len(files) == 1
        assert payload == files[0].read_bytes() + b"\nDone.\n"


def test_clients_log_in_independently(workdir):
    with _server(workdir) as server:
        server.handle_line("a", "alice password")
        assert server.handle_line("b", "echo hi") == [("b", b"Sai tai khoan. Nhap lai:\n")]


def test_socket_client_receives_welcome(workdir):
    with _server(workdir) as server:
        with socket.create_connection(server.address, timeout=5) as conn:
            server._accept(_NullSelector())
            assert conn.recv(64) == b"Hay gui user pass de dang nhap:\n"


class _NullSelector:
    def register(self, *args, **kwargs):
        return None


def test_main_reports_bind_failure(workdir):
    blocker = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    blocker.bind(("127.0.0.1", 0))
    blocker.listen(1)
    try:
        port = blocker.getsockname()[1]
        assert main(["--host", "127.0.0.1", "--port", str(port)]) == 1
    finally:
        blocker.close()