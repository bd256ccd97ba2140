import socket
import threading

import pytest

from sockdemo.chat_select import (
    BAD_SYNTAX,
    NAME_HAS_SPACES,
    REGISTERED,
    WELCOME,
    ChatServer,
    Registration,
    RegistrationError,
    format_message,
    main,
    parse_registration,
)
from sockdemo.lines import open_listener


def test_parse_registration_simple():
    assert parse_registration("1: alice") == Registration("1", "alice")


def test_parse_registration_without_space_after_colon():
    assert parse_registration("7:carol") == Registration("7", "carol")


def test_parse_registration_keeps_id_text_before_colon():
    assert parse_registration("abc : bob").client_id == "abc "


def test_parse_registration_name_with_spaces():
    with pytest.raises(RegistrationError) as info:
        parse_registration("1: alice smith")
    assert info.value.reply == NAME_HAS_SPACES


@pytest.mark.parametrize("line", ["", "alice", ": alice", "1:", "1:   "])
def test_parse_registration_bad_syntax(line):
    with pytest.raises(RegistrationError) as info:
        parse_registration(line)
    assert info.value.reply == BAD_SYNTAX


def test_format_message():
    assert format_message("1", "hello") == "1: hello\n"


@pytest.fixture
def server():
    srv = ChatServer("127.0.0.1", 0)
    yield srv
    srv.close()


def test_handle_line_rejects_bad_registration(server):
    assert server.handle_line("a", "nonsense") == [("a", BAD_SYNTAX.encode())]


def test_handle_line_registers(server):
    assert server.handle_line("a", "1: alice") == [("a", REGISTERED.encode())]


def test_handle_line_broadcasts_to_other_registered(server):
    server.handle_line("a", "1: alice")
    server.handle_line("b", "2: bob")
    server.handle_line("c", "junk")
    deliveries = server.handle_line("a", "hi")
    assert deliveries == [("b", b"1: hi\n")]


def test_registration_like_text_is_relayed_after_registering(server):
    server.handle_line("a", "1: alice")
    server.handle_line("b", "2: bob")
    deliveries = server.handle_line("b", "3: carol")
    assert deliveries == [("a", b"2: 3: carol\n")]


def _read_line(sock):
    data = b""
    while not data.endswith(b"\n"):
        chunk = sock.recv(1024)
        if not chunk:
            break
        data += chunk
    return data


def _start(server):
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()


def test_serve_forever_relays_between_clients():
    server = ChatServer("127.0.0.1", 0)
    _start(server)
    address = server.address
    with socket.create_connection(address, timeout=5) as a, socket.create_connection(
        address, timeout=5
    ) as b:
        assert _read_line(a) == WELCOME.encode()
        assert _read_line(b) == WELCOME.encode()
        a.sendall(b"1: alice\r\n")
        assert _read_line(a) == REGISTERED.encode()
        b.sendall(b"2: bob\n")
        assert _read_line(b) == REGISTERED.encode()
        a.sendall(b"hello\n")
        assert _read_line(b) == b"1: hello\n"


def test_serve_forever_refuses_when_full():
    server = ChatServer("127.0.0.1", 0, max_clients=1)
    _start(server)
    with socket.create_connection(server.address, timeout=5) as first:
        assert _read_line(first) == WELCOME.encode()
        with socket.create_connection(server.address, timeout=5) as second:
            assert second.recv(1024) == b""


def test_main_reports_bind_failure():
    busy = open_listener("127.0.0.1", 0)
    try:
        port = busy.getsockname()[1]
        assert main(["--host", "127.0.0.1", "--port", str(port)]) == 1
    finally:
        busy.close()