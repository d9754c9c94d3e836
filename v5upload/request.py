"""
Map the trailing command-line flags onto prosv5 upload options.
Unset options are left out of the invocation so prosv5 applies its own defaults.
"""
import re
from dataclasses import dataclass
from typing import Optional

from .errors import HelpRequested, MissingValue, UnrecognizedFlag

USAGE = """\
Usage: v5-upload <executable> [<project-name>] [options]

Converts <executable> to <executable>.bin (without .hot_init), writes
project.pros and runs `prosv5 upload`.

Options:
  --slot N              program slot on the brain (1-8)
  --name TEXT...        program name; takes every word up to the next option
  --after ACTION        what the brain does after upload: run, screen, none
  --port PORT           serial port to upload through, or "auto"
  --serial              open `prosv5 terminal` after a successful upload
  --help                show this message
"""

# Same safe set as shlex; everything else gets a backslash.
_UNSAFE = re.compile(r"([^\w@%+=:,./-])", re.ASCII)

FLAGS = ("--slot", "--name", "--after", "--port", "--serial", "--help")


@dataclass(frozen=True)
class UploadRequest:
    slot: Optional[int] = None
    name: Optional[str] = None
    after: Optional[str] = None
    port: Optional[str] = None
    open_serial: bool = False


def shell_escape(text):
    if text == "":
        return "''"
    return _UNSAFE.sub(r"\\\1", text)


def _take_value(tokens, i):
    if i + 1 >= len(tokens):
        raise MissingValue(tokens[i])
    return tokens[i + 1]


def parse(tokens) -> UploadRequest:
    tokens = list(tokens)
    if "--help" in tokens:
        raise HelpRequested(USAGE)

    fields = {}
    i = 0
    while i < len(tokens):
        tok = tokens[i]
        if tok == "--slot":
            value = _take_value(tokens, i)
            try:
                fields["slot"] = int(value)
            except ValueError:
                raise UnrecognizedFlag(f"--slot {value}") from None
            i += 2
        elif tok in ("--after", "--port"):
            fields[tok[2:]] = _take_value(tokens, i)
            i += 2
        elif tok == "--name":
            # Program names may contain spaces: take words up to the next known flag.
            end = i + 1
            while end < len(tokens) and tokens[end] not in FLAGS:
                end += 1
            fields["name"] = shell_escape(" ".join(tokens[i + 1 : end]))
            i = end
        elif tok == "--serial":
            fields["open_serial"] = True
            i += 1
        else:
            raise UnrecognizedFlag(tok)
    return UploadRequest(**fields)


def to_invocation(request):
    """Flags for `prosv5 upload`, fixed order: slot, name, after, port."""
    args = []
    if request.slot is not None:
        args += ["--slot", str(request.slot)]
    if request.name is not None:
        args += ["--name", request.name]
    if request.after is not None:
        args += ["--after", request.after]
    if request.port is not None:
        args += ["--port", request.port]
    return args
