"""
Turn the linked ELF into the flat binary the V5 loader expects.
The .hot_init section only serves the hot-reload path and is stripped.
"""
import os
import subprocess
from dataclasses import dataclass

from .errors import ConversionFailure

OBJCOPY = os.environ.get("V5_OBJCOPY", "arm-none-eabi-objcopy")
BINARY_EXT = ".bin"
HOT_INIT_SECTION = ".hot_init"


@dataclass(frozen=True)
class BuildArtifact:
    source_path: str
    binary_path: str
    stripped_section: str = HOT_INIT_SECTION


def binary_path_for(source_path):
    # Appended, not swapped: build/robot.elf -> build/robot.elf.bin
    return str(source_path) + BINARY_EXT


def objcopy_command(artifact):
    return [
        OBJCOPY,
        "-O",
        "binary",
        "-R",
        artifact.stripped_section,
        artifact.source_path,
        artifact.binary_path,
    ]


def prepare(executable_path) -> BuildArtifact:
    source = str(executable_path)
    artifact = BuildArtifact(source_path=source, binary_path=binary_path_for(source))

    print("Converting ELF to binary...")
    print(f"  ELF: {artifact.source_path}")
    print(f"  BIN: {artifact.binary_path}")

    cmd = objcopy_command(artifact)
    try:
        result = subprocess.run(cmd, check=False)
    except OSError as exc:
        raise ConversionFailure(f"failed to execute {OBJCOPY}: {exc}") from exc

    if result.returncode != 0:
        raise ConversionFailure(f"{OBJCOPY} failed with exit code {result.returncode}.")
    return artifact
