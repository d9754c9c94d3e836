"""
Post-build upload for V5 programs: ELF -> .bin -> project.pros -> prosv5 upload.

Usage: v5-upload <executable> [<project-name>] [--slot N] [--name TEXT...]
                 [--after run|screen|none] [--port PORT|auto] [--serial] [--help]

Suitable as a cargo runner: cargo passes the built ELF as the first argument.
"""
import sys
from dataclasses import replace

from . import artifact, descriptor, dispatch, ports
from .errors import HelpRequested, UploadError, UsageError
from .request import USAGE, parse


def split_positionals(argv):
    """Return (executable, project name hint, trailing flag tokens)."""
    if not argv or argv[0].startswith("--"):
        if "--help" in argv:
            raise HelpRequested(USAGE)
        raise UsageError("missing executable path")
    executable, rest = argv[0], argv[1:]
    if rest and not rest[0].startswith("--"):
        return executable, rest[0], rest[1:]
    # No project name given: fall back to the executable path
    return executable, executable, rest


def run(argv) -> int:
    executable, name_hint, tokens = split_positionals(argv)

    request = None
    if tokens:
        request = parse(tokens)
        if request.port == "auto":
            port = ports.find_v5_port()
            print(f"Using serial port: {port}")
            request = replace(request, port=port)

    built = artifact.prepare(executable)
    descriptor.write(built, name_hint)

    if request is None:
        return dispatch.upload()
    return dispatch.dispatch(request)


def main(argv=None) -> int:
    argv = sys.argv[1:] if argv is None else list(argv)
    try:
        return run(argv)
    except HelpRequested:
        print(USAGE, end="")
        return HelpRequested.exit_code
    except UsageError as exc:
        print(exc, file=sys.stderr)
        print(USAGE, end="")
        return exc.exit_code
    except UploadError as exc:
        print(f"v5-upload: {exc}", file=sys.stderr)
        return exc.exit_code
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        return 130
