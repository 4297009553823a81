import io
import socket
import threading

import pytest

from sysprojects.fetchmail import main, run
from sysprojects.imap_parse import FetchmailError, Options

SELECT = (
    b"* FLAGS (\\Seen)\r\n"
    b"* OK [PERMANENTFLAGS ()] ok\r\n"
    b"* 2 EXISTS\r\n"
    b"* 0 RECENT\r\n"
    b"TST2 OK [READ-WRITE] done\r\n"
)


def header_reply(tag: bytes, field: bytes, payload: bytes) -> bytes:
    return (
        b"* 1 FETCH (BODY[HEADER.FIELDS (" + field + b")] {%d}\r\n" % len(payload)
        + payload
        + b")\r\n"
        + tag
        + b" OK done\r\n"
    )


def body_reply(tag: bytes, body: bytes) -> bytes:
    return b"* 1 FETCH (BODY[] {%d}\r\n" % len(body) + body + b")\r\n" + tag + b" OK done\r\n"


def _serve(listener, replies, seen):
    conn, _ = listener.accept()
    with conn:
        conn.sendall(b"* OK ready\r\n")
        with conn.makefile("rb") as reader:
            for raw in reader:
                seen.append(raw)
                tag = raw.split(b" ", 1)[0]
                conn.sendall(replies.get(tag, tag + b" OK done\r\n"))


@pytest.fixture
def serve():
    started = []

    def start(replies):
        listener = socket.create_server(("127.0.0.1", 0))
        seen = []
        thread = threading.Thread(target=_serve, args=(listener, replies, seen), daemon=True)
        thread.start()
        started.append((listener, thread))
        return listener.getsockname()[1], seen

    yield start
    for listener, thread in started:
        thread.join(timeout=5)
        listener.close()


def make_options(command, port, number=None, folder="INBOX"):
    password = "password"
    return Options(
        command=command,
        server="127.0.0.1",
        user="user",
        password=password,
        folder=folder,
        number=number,
        port=port,
    )


def test_run_retrieve(serve):
    body = b"Subject: hi\r\n\r\nHello\r\n"
    port, seen = serve({b"TST2": SELECT, b"TST3": body_reply(b"TST3", body)})
    out = io.StringIO()
    run(make_options("retrieve", port, "1"), out)
    assert out.getvalue() == body.decode()
    assert seen[-1] == b"TST3 FETCH 1 BODY.PEEK[]\r\n"


def test_run_retrieve_defaults_to_last_message(serve):
    body = b"Subject: last\r\n\r\n"
    port, seen = serve({b"TST2": SELECT, b"TST3": body_reply(b"TST3", body)})
    out = io.StringIO()
    run(make_options("retrieve", port), out)
    assert out.getvalue() == "Subject: last\r\n\r\n"
    assert seen[-1] == b"TST3 FETCH 2 BODY.PEEK[]\r\n"


def test_run_parse(serve):
    replies = {
        b"TST2": SELECT,
        b"TST5": header_reply(b"TST5", b"From", b"From: a@example.com\r\n\r\n"),
        b"TST6": header_reply(b"TST6", b"To", b"To: b@example.com\r\n\r\n"),
        b"TST7": header_reply(b"TST7", b"Date", b"Date: today\r\n\r\n"),
        b"TST8": header_reply(b"TST8", b"Subject", b"Subject: hello\r\n\r\n"),
    }
    port, _ = serve(replies)
    out = io.StringIO()
    run(make_options("parse", port, "1"), out)
    assert out.getvalue().splitlines() == [
        "From: a@example.com",
        "To: b@example.com",
        "Date: today",
        "Subject: hello",
    ]


def test_run_list(serve):
    replies = {
        b"TST2": SELECT,
        b"TST10": b"* SEARCH 1 2\r\nTST10 OK done\r\n",
        b"L1": header_reply(b"L1", b"Subject", b"Subject: one\r\n\r\n"),
        b"L2": header_reply(b"L2", b"Subject", b"\r\n"),
    }
    port, _ = serve(replies)
    out = io.StringIO()
    run(make_options("list", port), out)
    assert out.getvalue() == "1: one\n2: <No subject>\n"


def test_run_mime(serve):
    message = (
        b'Content-Type: multipart/alternative;\r\n boundary="B1"\r\n\r\n'
        b"--B1\r\n"
        b"Content-Type: text/plain; charset=utf-8\r\n"
        b"Content-Transfer-Encoding: 7bit\r\n"
        b"\r\n"
        b"Body text\r\n"
        b"\r\n"
        b"--B1--\r\n"
    )
    port, _ = serve({b"TST2": SELECT, b"TST9": body_reply(b"TST9", message)})
    out = io.StringIO()
    run(make_options("mime", port, "1"), out)
    assert out.getvalue() == "Body text\r\n"


def test_run_login_failure(serve):
    port, _ = serve({b"TST1": b"TST1 NO [AUTHENTICATIONFAILED] failed\r\n"})
    with pytest.raises(FetchmailError) as info:
        run(make_options("retrieve", port, "1"), io.StringIO())
    assert info.value.message == "Login failure"
    assert info.value.code == 3


def test_main_too_few_arguments(capsys):
    assert main(["-u", "user", "retrieve", "host"]) == 1
    assert "Not enough of number of argument" in capsys.readouterr().err


def test_main_missing_password(capsys):
    assert main(["-u", "user", "-n", "1", "retrieve", "host"]) == 1
    assert "Lack of password" in capsys.readouterr().err


def test_main_invalid_server_name(capsys):
    password = "password"
    assert main(["-u", "user", "-p", password, "retrieve", "h"]) == 2
    assert "Invalid serverName" in capsys.readouterr().err


def test_main_blank_folder(capsys):
    password = "password"
    assert main(["-u", "user", "-p", password, "-f", " ", "retrieve", "host"]) == 3
    assert "Zero length or blank folder" in capsys.readouterr().err