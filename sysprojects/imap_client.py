"""An IMAP session that logs in and fetches messages, headers and text bodies."""

from __future__ import annotations

import socket
from collections.abc import Callable, Iterable, Iterator

from sysprojects.imap_parse import (
    FetchmailError,
    boundary_value,
    header_value,
    last_message_number,
    literal_size,
    search_sequence,
    server_error,
)

IMAP_PORT = 143
_CHUNK = 4096

_FIELD_NAMES = {"FROM": "From", "TO": "To"}
_PARSE_FIELDS = (("FROM", "TST5"), ("TO", "TST6"), ("Date", "TST7"), ("Subject", "TST8"))

_BOUNDARY_PREFIX = " boundary="
_CONTENT_TYPE = "content-type: text/plain"
_CHARSET = "charset=utf-8"
_ENCODINGS = (
    "content-transfer-encoding: quoted-printable",
    "content-transfer-encoding: 7bit",
    "content-transfer-encoding: 8bit",
)


def _starts(line: str, prefix: str) -> bool:
    return line[: len(prefix)].lower() == prefix.lower()


def _lines(text: str) -> Iterator[str]:
    parts = text.split("\n")
    for part in parts[:-1]:
        yield part + "\n"
    if parts[-1]:
        yield parts[-1]


def _headers_match(next_line: Callable[[], str]) -> bool:
    """Scan part headers until three of the wanted markers have been counted."""
    type_found = charset_found = encoding_found = False
    remaining = 3
    while remaining > 0:
        line = next_line()
        if _starts(line, _CONTENT_TYPE):
            type_found = True
            remaining -= 1
            if _starts(line[len(_CONTENT_TYPE) + 2:], _CHARSET):
                charset_found = True
                remaining -= 1
        if not charset_found:
            line = line.lower()
            if _CHARSET not in line:
                charset_found = True
                remaining -= 1
        if any(_starts(line, encoding) for encoding in _ENCODINGS):
            encoding_found = True
            remaining -= 1
    return type_found and charset_found and encoding_found


def _mime_body(lines: Iterable[str]) -> list[str]:
    """Lines of the first plain-text UTF-8 part, without its last line."""
    source = iter(lines)

    def next_line() -> str:
        try:
            return next(source)
        except StopIteration:
            raise FetchmailError("No matched information", 4) from None

    boundary = "--"
    body_found = False
    skip_previous = False
    previous = ""
    output: list[str] = []
    while True:
        if body_found:
            line = next(source, None)
            if line is None:
                break
        else:
            line = next_line()
        if body_found and _starts(line, boundary):
            break
        if _starts(line, _BOUNDARY_PREFIX):
            boundary = boundary_value(line[len(_BOUNDARY_PREFIX):])
        if _starts(line, boundary):
            if _headers_match(next_line):
                body_found = True
                skip_previous = True
                next(source, None)
            continue
        if body_found and not skip_previous:
            output.append(previous)
        previous = line
        skip_previous = False
    return output


class ImapClient:
    """A client speaking just enough IMAP to read messages from one folder."""

    def __init__(self, sock: socket.socket) -> None:
        self._sock = sock
        self._buffer = bytearray()

    @classmethod
    def connect(cls, server: str, port: int = IMAP_PORT) -> ImapClient:
        """Open a connection to ``server``, over IPv6 or IPv4."""
        try:
            sock = socket.create_connection((server, port))
        except socket.gaierror as error:
            raise FetchmailError("error in connect server", 2) from error
        except OSError as error:
            raise FetchmailError("failed connect", 1) from error
        return cls(sock)

    def close(self) -> None:
        """Close the connection."""
        self._sock.close()

    def __enter__(self) -> ImapClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def send(self, command: str) -> None:
        """Send one command line; the line ending is added here."""
        try:
            self._sock.sendall(f"{command}\r\n".encode("utf-8"))
        except OSError as error:
            raise FetchmailError("error in writen to server", 3) from error

    def _fill(self) -> None:
        try:
            data = self._sock.recv(_CHUNK)
        except OSError as error:
            raise FetchmailError("error in reading from server", 3) from error
        if not data:
            raise FetchmailError("connection closed by server", 3)
        self._buffer.extend(data)

    def readline(self) -> bytes:
        """Read one line, line ending included."""
        while b"\n" not in self._buffer:
            self._fill()
        end = self._buffer.index(b"\n") + 1
        line = bytes(self._buffer[:end])
        del self._buffer[:end]
        return line

    def read_exact(self, size: int) -> bytes:
        """Read exactly ``size`` bytes."""
        while len(self._buffer) < size:
            self._fill()
        data = bytes(self._buffer[:size])
        del self._buffer[:size]
        return data

    def _read_response(self, tag: str) -> tuple[bytes, bytes]:
        """Read up to the tagged line; return everything read and that line."""
        prefix = f"{tag} ".encode("utf-8")
        parts = []
        while True:
            line = self.readline()
            parts.append(line)
            if line.startswith(prefix):
                return b"".join(parts), line
            if line.rstrip().endswith(b"}"):
                size = literal_size(line.decode("latin-1"))
                if size is not None and size > 0:
                    parts.append(self.read_exact(size))

    @staticmethod
    def _is_ok(status: bytes, tag: str) -> bool:
        return status[len(tag) + 1:].upper().startswith(b"OK")

    def login(self, user: str, password: str, folder: str, number: str | None) -> str:
        """Log in and select ``folder``; return the message number to work on.

        Without ``number`` the last message in the folder is chosen.
        """
        self.readline()
        self.send(f"TST1 LOGIN {user} {password}")
        _, status = self._read_response("TST1")
        if not self._is_ok(status, "TST1"):
            raise FetchmailError("Login failure", 3)
        self.send(f'TST2 SELECT "{folder}"')
        response, status = self._read_response("TST2")
        if not self._is_ok(status, "TST2"):
            raise FetchmailError("Folder not found", 3)
        if number:
            return number
        last = last_message_number(response.decode("latin-1"))
        return str(last) if last is not None else "0"

    def _fetch_body(self, tag: str, number: str) -> bytes:
        self.send(f"{tag} FETCH {number} BODY.PEEK[]")
        first = self.readline().decode("latin-1")
        size = literal_size(first)
        if size is None:
            error = server_error(first)
            if error is not None:
                raise error
            raise FetchmailError(f"unexpected server response: {first.strip()}", 3)
        body = self.read_exact(max(size, 0))
        self._read_response(tag)
        return body

    def retrieve(self, number: str) -> str:
        """The whole raw message ``number``."""
        return self._fetch_body("TST3", number).decode("utf-8", "replace")

    def header_field(self, number: str, field: str, tag: str, mode: str = "parse") -> str:
        """One header of message ``number``, prefixed by the field name or number.

        ``mode`` "parse" puts the field name in front, "list" the message number.
        """
        name = _FIELD_NAMES.get(field, field)
        self.send(f"{tag} FETCH {number} BODY.PEEK[HEADER.FIELDS ({name})]")
        response, _ = self._read_response(tag)
        value = header_value(response.decode("latin-1"), field)
        value = value.encode("latin-1").decode("utf-8", "replace")
        if mode == "parse":
            prefix = name
        elif mode == "list":
            prefix = number
        else:
            prefix = ""
        return prefix + value

    def parse(self, number: str) -> list[str]:
        """The From, To, Date and Subject lines of message ``number``."""
        return [self.header_field(number, field, tag, "parse") for field, tag in _PARSE_FIELDS]

    def mime(self, number: str) -> str:
        """The plain-text UTF-8 body of a MIME message."""
        text = self._fetch_body("TST9", number).decode("utf-8", "replace")
        return "".join(_mime_body(_lines(text)))

    def list_subjects(self) -> list[str]:
        """One "number: subject" line for each message in the folder."""
        self.send("TST10 SEARCH ALL")
        response, _ = self._read_response("TST10")
        sequence: list[str] = []
        for line in _lines(response.decode("latin-1")):
            found = search_sequence(line)
            if found:
                sequence = found
                break
        return [
            self.header_field(number, "Subject", f"L{number}", "list") for number in sequence
        ]