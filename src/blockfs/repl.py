"""Interactive front end: read a line, run it through the shell, print.

All behaviour lives in ``Shell``; this module only owns the terminal
(prompt, readline completion, Ctrl+C / Ctrl+D).
"""

import readline

from blockfs.completer import Completer
from blockfs.engine import FileSystemEngine
from blockfs.shell import Shell

PROMPT_TEMPLATE = "blockfs:{cwd} $ "
BANNER = "blockfs: type 'help' for commands, 'exit' to quit."


def build_prompt(engine: FileSystemEngine) -> str:
    """Return a prompt showing the working directory, e.g. ``blockfs:/docs $ ``."""
    return PROMPT_TEMPLATE.format(cwd=engine.pwd())


def _install_completer(shell: Shell) -> None:
    readline.set_completer(Completer(shell).complete)
    # Paths contain "/" and "-", so only whitespace separates words.
    readline.set_completer_delims(" \t")
    readline.parse_and_bind("tab: complete")


def run() -> None:
    """Start a fresh file system and serve commands until exit, Ctrl+D or Ctrl+C."""
    engine = FileSystemEngine()
    shell = Shell(engine=engine)
    _install_completer(shell)

    print(BANNER)  # noqa: T201
    try:
        while True:
            try:
                line = input(build_prompt(engine))
            except EOFError:
                print()  # noqa: T201
                return
            output = shell.execute(line)
            if output == Shell.EXIT_SENTINEL:
                return
            if output:
                print(output)  # noqa: T201
    except KeyboardInterrupt:
        print("\nInterrupted.")  # noqa: T201
