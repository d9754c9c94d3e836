"""
Run `prosv5 upload` with the request's flags, then optionally `prosv5 terminal`.
Both children inherit cwd and stdio; their output is never captured.
"""
import os
import sys
import subprocess

from .errors import ChildProcessFailure
from .request import to_invocation

PROS_CLI = os.environ.get("V5_PROS_CLI", "prosv5")


def upload_command(flags=()):
    return [PROS_CLI, "upload", *flags]


def terminal_command():
    return [PROS_CLI, "terminal"]


def _run(cmd):
    try:
        return subprocess.run(cmd, check=False).returncode
    except OSError as exc:
        raise ChildProcessFailure(cmd, exc) from exc


def upload(flags=()) -> int:
    cmd = upload_command(flags)
    print("Uploading:", " ".join(cmd))
    return _run(cmd)


def dispatch(request) -> int:
    """Upload, then open the terminal only if asked and the upload succeeded."""
    rc = upload(to_invocation(request))
    if rc != 0:
        print(f"{PROS_CLI} upload failed with exit code {rc}.", file=sys.stderr)
        return rc
    if not request.open_serial:
        return rc

    print("Opening serial terminal...")
    return _run(terminal_command())
