# sysprojects

Two small command-line tools:

- `allocate` simulates round-robin scheduling of processes under four memory
  models: unlimited memory, contiguous first-fit allocation, paged allocation
  and virtual memory with page eviction.
- `fetchmail` connects to an IMAP server and retrieves, parses, lists or
  extracts the plain-text MIME part of messages.

## Installation

```
pip install .
```

For running the tests:

```
pip install ".[test]"
pytest
```

## allocate

```
allocate -f processes.txt -m first-fit -q 3
```

All three options are required and may come in any order. With any other
number of arguments, or one of the three missing, the command prints
`Wrong Input`.

- `-f` — the input file. Each record reads
  `<arrival-time> <name> <service-time> <memory-KB>`, for example
  `0 P4 30 16`. Reading stops at the first record that does not parse.
  If the file cannot be opened, `NO INPUT THERE` is printed.
- `-m` — the memory model: `infinite`, `first-fit`, `paged` or `virtual`.
- `-q` — the scheduling quantum, a positive whole number.

Memory is 2048 KB; the paged and virtual models split it into 512 frames of
4 KB, and the virtual model needs at least four resident frames (or all the
frames a process needs, if fewer) before a process runs.

Each event is printed as it happens, for example

```
0,RUNNING,process-name=P4,remaining-time=30,mem-usage=1%,allocated-at=0
30,FINISHED,process-name=P4,proc-remaining=0
```

The paged and virtual models print `mem-frames=[...]` instead of
`allocated-at`, and an `EVICTED,evicted-frames=[...]` line whenever frames
are freed. The report ends with the average turnaround time, the maximum and
average time overhead, and the makespan:

```
Turnaround time 30
Time overhead 1.00 1.00
Makespan 30
```

The simulation can also be driven from Python; `simulate` returns the report
as a list of lines:

```python
from sysprojects.process import parse_processes
from sysprojects.scheduler import simulate

processes = parse_processes(["0 P1 10 16", "2 P2 4 32"])
for line in simulate(processes, "paged", 3):
    print(line)
```

`run_infinite`, `run_first_fit`, `run_paged` and `run_virtual` in
`sysprojects.scheduler` run one model each; `ContiguousMemory` and
`PageFrames` in `sysprojects.memory` are the memory models they use.

## fetchmail

```
fetchmail -u user@example.com -p password [-f folder] [-n message] <command> <server>
```

The command and the server always come last; the options may come in any
order before them.

Commands:

- `retrieve` — print the raw message.
- `parse` — print its From, To, Date and Subject headers, one per line
  (`Subject: <No subject>` when there is none).
- `mime` — print the body of its `text/plain; charset=UTF-8` MIME part.
- `list` — print `number: subject` for every message in the folder.

The folder defaults to `INBOX`; when no message number is given, the last
message in the folder is used.

Exit codes:

- 1 — missing or bad arguments, or the connection could not be made;
- 2 — an invalid server name, or one that does not resolve;
- 3 — a blank folder name, or a server error (login failure, folder or
  message not found, connection closed);
- 4 — no matching MIME part was found;
- 5 — the mailbox is empty.

Messages for codes 3, 4 and 5 go to standard output, the others to standard
error.

From Python, `sysprojects.imap_client.ImapClient` offers the same session:
`connect`, `login`, `retrieve`, `parse`, `mime` and `list_subjects`.

### What fetchmail does not do

It speaks plain IMAP on port 143 only: there is no TLS and no option to
choose another port on the command line. It does not decode quoted-printable
or other transfer encodings, and it never changes or deletes messages.