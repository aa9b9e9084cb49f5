"""A scripted walk through the file system.

The script formats a small file system, creates and hard-links a file,
grows a second file with ``truncate``, writes into it sparsely through
an open handle, unlinks it while the handle is still open, and shows
that the data stays readable until the handle is closed.  A short
directory and symlink tour follows.

Run it with ``blockfs-demo`` or ``python -m blockfs demo``.
"""

from blockfs.engine import FileSystemEngine
from blockfs.shell import Shell

DEMO_SCRIPT: tuple[str, ...] = (
    "mkfs 10",
    "create file.txt",
    "stat file.txt",
    "ls",
    "link file.txt document.txt",
    "ls",
    "stat document.txt",
    "create some.dat",
    "ls",
    "truncate some.dat 1024",
    "stat some.dat",
    "open some.dat",
    "write 0 0123456789",
    "stat some.dat",
    "seek 0 7",
    "read 0 2",
    "seek 0 256",
    "write 0 abcdefg",
    "seek 0 0",
    "read 0 384",
    "stat some.dat",
    "unlink some.dat",
    "ls",
    "seek 0 0",
    "read 0 10",
    "close 0",
    "mkdir docs",
    "symlink /docs shortcut",
    "cd shortcut",
    "pwd",
    "create notes.txt",
    "ls",
    "cd ..",
    "ls /",
)


def run_demo(engine: FileSystemEngine | None = None) -> list[tuple[str, str]]:
    """Run ``DEMO_SCRIPT`` and return each command with its output.

    Args:
        engine: The engine to drive (a fresh one if omitted).

    """
    shell = Shell(engine=engine if engine is not None else FileSystemEngine())
    return [(command, shell.execute(command)) for command in DEMO_SCRIPT]


def main() -> None:
    """Run the demo and print the transcript followed by the status log."""
    engine = FileSystemEngine()
    for command, output in run_demo(engine):
        print(f"$ {command}")  # noqa: T201
        if output:
            print(output)  # noqa: T201
    print("\n--- log ---")  # noqa: T201
    for line in engine.logger.lines():
        print(line)  # noqa: T201
