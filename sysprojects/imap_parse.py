"""Command-line options and parsing of IMAP server responses for the mail fetcher."""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass

DEFAULT_FOLDER = "INBOX"
DEFAULT_PORT = 143
LONGEST_SERVER = 253
LARGE_MAIL_NUMBER_LENGTH = 10
MIN_ARGUMENTS = 5

_LITERAL = re.compile(r"[^{]+\{\s*([+-]?\d+)")
_EXISTS = re.compile(r"\*\s*([+-]?\d+)")
_SEARCH = re.compile(r"\*\s*SEARCH\s*([^\r\n]+)")
_ATOI = re.compile(r"\s*([+-]?\d+)")

_SERVER_ERRORS = (
    ("No mailbox selected", "Folder not found"),
    ("Error in IMAP command received by server", "Login failure"),
    ("Invalid messageset", "Message not found"),
)

_FIELD_NAMES = {"FROM": "From", "TO": "To"}

_FOLDER_FLAG = "-f"
_OPTION_FIELDS = {"-u": "user", "-p": "password", "-n": "number"}


class FetchmailError(Exception):
    """A failure that ends the fetcher with a given exit code."""

    def __init__(self, message: str, code: int = 1) -> None:
        super().__init__(message)
        self.message = message
        self.code = code


@dataclass
class Options:
    """What the fetcher was asked to do and where."""

    command: str
    server: str
    user: str | None = None
    password: str | None = None
    folder: str = DEFAULT_FOLDER
    number: str | None = None
    port: int = DEFAULT_PORT


def parse_arguments(argv: Sequence[str]) -> Options:
    """Build options from the arguments that follow the program name.

    The last two arguments are the command and the server; ``-u``, ``-p``,
    ``-f`` and ``-n`` may come in any order before them.
    """
    args = list(argv)
    if len(args) < MIN_ARGUMENTS:
        raise FetchmailError("Not enough of number of argument", 1)
    found: dict[str, str] = {}
    folder = DEFAULT_FOLDER
    for index, arg in enumerate(args):
        if arg == _FOLDER_FLAG:
            if folder != DEFAULT_FOLDER:
                continue
        elif arg in _OPTION_FIELDS:
            if _OPTION_FIELDS[arg] in found:
                continue
        else:
            continue
        if index + 1 >= len(args) - 2:
            raise FetchmailError(f"missing value for {arg}", 1)
        value = args[index + 1]
        if arg == _FOLDER_FLAG:
            folder = value
        else:
            found[_OPTION_FIELDS[arg]] = value
    return Options(command=args[-2], server=args[-1], folder=folder, **found)


def _atoi(text: str) -> int:
    match = _ATOI.match(text)
    return int(match.group(1)) if match else 0


def validate_options(options: Options) -> None:
    """Raise FetchmailError if the options cannot be used."""
    if options.password is None:
        raise FetchmailError("Lack of password", 1)
    if options.user is None:
        raise FetchmailError("Lack of username", 1)
    if not 1 < len(options.server) <= LONGEST_SERVER:
        raise FetchmailError("Invalid serverName", 2)
    number = options.number
    if number is not None:
        if len(number) > LARGE_MAIL_NUMBER_LENGTH:
            raise FetchmailError("Over size of message number", 1)
        if _atoi(number) <= 0:
            raise FetchmailError("Negative size of message number", 1)
        if not all(char in "0123456789" for char in number):
            raise FetchmailError("Invalid message number", 1)
    if options.folder != DEFAULT_FOLDER and options.folder in ("", " "):
        raise FetchmailError("Zero length or blank folder", 3)


def literal_size(line: str) -> int | None:
    """Size of the ``{n}`` literal announced in a response line, or None."""
    match = _LITERAL.match(line)
    return int(match.group(1)) if match else None


def server_error(line: str) -> FetchmailError | None:
    """The error a response line without a literal reports, if it is a known one."""
    for marker, message in _SERVER_ERRORS:
        if marker in line:
            return FetchmailError(message, 3)
    return None


def last_message_number(select_response: str) -> int | None:
    """Number of messages in the selected folder, read from a SELECT response.

    Returns None when the response does not carry the count where expected.
    """
    lines = [line for line in select_response.split("\n") if line]
    if len(lines) < 3:
        return None
    match = _EXISTS.match(lines[2])
    if not match:
        return None
    count = int(match.group(1))
    if count == 0:
        raise FetchmailError("Currently no messages in mailbox", 5)
    return count


def boundary_value(text: str) -> str:
    """The MIME boundary delimiter ("--" and value) from the text after ``boundary=``."""
    chars = ["--"]
    quotes = 0
    for char in text:
        if quotes == 2 or char in "\r\n":
            break
        if char == '"':
            quotes += 1
        elif char != "'":
            chars.append(char)
    return "".join(chars)


def header_value(response: str, field: str) -> str:
    """The ``: value`` part of a header field from a HEADER.FIELDS fetch response.

    Folded lines are joined; an absent field gives ``:`` or, for the
    subject, ``: <No subject>``.
    """
    name = _FIELD_NAMES.get(field, field)
    first_line = response.split("\n", 1)[0]
    size = literal_size(first_line) or 0
    if size > 2:
        start = len(first_line) + len(name) + 1
        end = len(first_line) + size - 3
        return "".join(c for c in response[start:end] if c not in "\r\n")
    return ": <No subject>" if name == "Subject" else ":"


def search_sequence(line: str) -> list[str]:
    """Message numbers listed in a ``* SEARCH`` response line."""
    match = _SEARCH.match(line)
    if not match:
        return []
    return [token for token in match.group(1).split(" ") if token]