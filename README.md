# sockdemo

A handful of small network servers built on plain sockets. Each TCP
server handles all of its clients from a single thread, waiting on the
listening socket and every connection with `selectors` rather than
starting a thread per client. The TCP servers listen on port 8080 on all
interfaces unless told otherwise with `--host` and `--port`.

## Installation

```
pip install .
```

To run the test suite:

```
pip install ".[test]"
pytest
```

## Commands

### `sockdemo-chat-select`

A group chat server. A new client is first asked to register with a line
of the form `<id>: <name>`. The name must be a single word: a name with
spaces is rejected with a request to try again, and so is any line that
does not follow the pattern. Once registered, every line the client sends
is forwarded to all other registered clients as `<id>: <text>`. Only the
part of a received chunk before its first carriage return or line feed
is used. At most 64 clients are served at a time; further connections
are closed at once.

### `sockdemo-chat-poll`

A group chat server with timestamps. A new client registers with
`client_id: client_name` and is greeted by name. Each message is then
passed on to every other registered client as

```
YYYY/MM/DD HH:MM:AM name: text
```

using the server's local time on a 12-hour clock. The server prints a
notice for every connection and disconnection, and serves up to 1023
clients at a time.

### `sockdemo-telnet`

A remote command shell. A client logs in by sending `user password` on
one line; the pair is checked against a plain-text database file of
whitespace-separated user and password pairs (`databases.txt` in the
current directory by default, or the file given with `--database`).
After a successful login each line the client sends is run as a shell
command with standard output and standard error written to
`out_<n>.txt` in the current directory; the file's contents are sent
back, followed by `Done.`. The file is deleted afterwards unless
`--keep-output` is given.

**This server runs arbitrary commands for anyone who can log in. Run it
only on a trusted network, for experiments.**

### `sockdemo-email`

An interactive address generator. Each client is asked for a full name
and then a student ID, and receives an e-mail address built from the
lower-cased given name (the last word of the name), the lower-cased
initials of the remaining words and the student ID without its first two
characters, at `example.com`. The client is then prompted for a new name
and may repeat as often as it likes.

### `sockdemo-udp-chat`

A two-party chat over UDP. Start it with the local port to listen on and
the address and port of the peer:

```
sockdemo-udp-chat 9000 127.0.0.1 9001
```

and on the other side:

```
sockdemo-udp-chat 9001 127.0.0.1 9000
```

Lines typed on standard input are sent to the peer; datagrams from the
peer are printed as they arrive. The program ends at end of input or on
Ctrl-C.

## Using the pieces from Python

The protocol logic is available without opening any sockets:

```python
from sockdemo.chat_select import parse_registration, format_message
from sockdemo.chat_poll import parse_name, format_timestamp
from sockdemo.auth import parse_credentials, check_login
from sockdemo.email_server import generate_email
from sockdemo.lines import cut_at_newline, strip_trailing_newline

generate_email("Nguyen Van An", "20201234")  # 'an.nv201234@example.com'
parse_registration("7: alice")                # Registration(client_id='7', name='alice')
```

`parse_registration` raises `RegistrationError` (a `ValueError` whose
`reply` attribute holds the text sent to the client); `parse_name` and
`parse_credentials` raise `ValueError`.

The server classes `chat_select.ChatServer`, `chat_poll.ChatServer`,
`telnet.TelnetServer` and `email_server.EmailServer` open their
listening socket when constructed (pass port `0` for a free port; the
bound address is in `address`) and can be used as context managers.
`serve_forever()` runs the event loop and `close()` shuts down the
listener and all client connections. `handle_line(client, line)` takes
any hashable client key and returns the `(recipient, payload)` pairs the
server would send, so a conversation can be driven without real clients.
`lines.open_listener()` creates the listening sockets they use.

`udp_chat.UdpChat` binds a non-blocking UDP socket and offers `send()`,
`receive()` (which returns `None` when no datagram is waiting), `run()`
and `close()`; `udp_chat.parse_args()` checks the three command-line
arguments.

## What it does not do

The package has servers only; connect to them with any line-based TCP
client such as `nc` or `telnet`. Registered names, logins and chat
messages are kept in memory and are lost when a server stops. Passwords
in the telnet database are stored and compared as plain text.