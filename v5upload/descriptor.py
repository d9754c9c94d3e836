"""
project.pros writer. prosv5 reads the descriptor with jsonpickle, so the
py/object and py/state envelope keys and their nesting must stay exactly as
below.
"""
import json
import os
import stat
import tempfile
from pathlib import Path

from .errors import PersistenceFailure

DESCRIPTOR_FILE = os.environ.get("V5_DESCRIPTOR", "project.pros")
KERNEL_VERSION = os.environ.get("V5_KERNEL_VERSION", "3.8.0")
TARGET = "v5"
ORIGIN = "pros-mainline"
PROJECT_CLASS = "pros.conductor.project.Project"
TEMPLATE_CLASS = "pros.conductor.templates.local_template.LocalTemplate"


def project_name(hint):
    """Drop everything up to and including the first '/': build/robot -> robot."""
    _, sep, rest = str(hint).partition("/")
    return rest if sep else str(hint)


def render(artifact, name) -> dict:
    return {
        "py/object": PROJECT_CLASS,
        "py/state": {
            "project_name": name,
            "target": TARGET,
            "templates": {
                "kernel": {
                    "location": "",
                    "metadata": {
                        "origin": ORIGIN,
                        "output": artifact.binary_path,
                    },
                    "name": "kernel",
                    "py/object": TEMPLATE_CLASS,
                    "supported_kernels": None,
                    "system_files": [],
                    "target": TARGET,
                    "user_files": [],
                    "version": KERNEL_VERSION,
                }
            },
            "upload_options": {},
        },
    }


def _file_mode(path):
    """Keep the old descriptor's mode; a new file gets 0666 minus the umask."""
    try:
        return stat.S_IMODE(path.stat().st_mode)
    except FileNotFoundError:
        umask = os.umask(0)
        os.umask(umask)
        return 0o666 & ~umask


def write(artifact, project_name_hint, path=None):
    """Replace the descriptor atomically; on failure the old file is untouched."""
    path = Path(path or DESCRIPTOR_FILE)
    text = json.dumps(render(artifact, project_name(project_name_hint)), indent=4) + "\n"

    tmp = None
    try:
        fd, name = tempfile.mkstemp(prefix=".project.", suffix=".tmp", dir=path.resolve().parent)
        tmp = Path(name)
        try:
            f = os.fdopen(fd, "w", encoding="utf-8")
        except OSError:
            os.close(fd)
            raise
        with f:
            f.write(text)
        os.chmod(tmp, _file_mode(path))
        os.replace(tmp, path)
    except OSError as exc:
        if tmp is not None and tmp.exists():
            tmp.unlink()
        raise PersistenceFailure(f"could not write {path}: {exc}") from exc
    print(f"Descriptor written to {path}.")
