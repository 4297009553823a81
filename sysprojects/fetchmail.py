"""Command line mail fetcher: retrieve, parse, mime and list over IMAP."""

from __future__ import annotations

import sys
from collections.abc import Sequence
from typing import TextIO

from sysprojects.imap_client import ImapClient
from sysprojects.imap_parse import FetchmailError, Options, parse_arguments, validate_options

_STDOUT_CODES = (3, 4, 5)


def run(options: Options, out: TextIO) -> None:
    """Log in as ``options`` say and write the command's output to ``out``."""
    with ImapClient.connect(options.server, options.port) as client:
        number = client.login(
            options.user or "", options.password or "", options.folder, options.number
        )
        command = options.command
        if command == "retrieve":
            out.write(client.retrieve(number))
        elif command == "parse":
            for line in client.parse(number):
                out.write(line + "\n")
        elif command == "mime":
            out.write(client.mime(number))
        elif command == "list":
            for line in client.list_subjects():
                out.write(line + "\n")


def main(argv: Sequence[str] | None = None) -> int:
    """Run the fetcher and return its exit code."""
    args = sys.argv[1:] if argv is None else list(argv)
    try:
        options = parse_arguments(args)
        validate_options(options)
    except FetchmailError as error:
        print(error.message, file=sys.stderr)
        return error.code
    try:
        run(options, sys.stdout)
    except FetchmailError as error:
        stream = sys.stdout if error.code in _STDOUT_CODES else sys.stderr
        print(error.message, file=stream)
        return error.code
    return 0


if __name__ == "__main__":
    raise SystemExit(main())