"""Tab completion for the blockfs REPL.

Three kinds of word are completed:

- the first word on the line, against the shell's command names;
- arguments of path-taking commands (and any word starting with
  ``/``), against the entries of the directory named so far;
- the first argument of handle-taking commands, against the handles
  that are currently open.

``candidates`` holds that logic and never touches readline, so tests
call it directly.  ``complete`` is the thin readline hook.
"""

from __future__ import annotations

import readline
from typing import TYPE_CHECKING

from blockfs.descriptors import PARENT_NAME, SELF_NAME, FileType
from blockfs.errors import FsError

if TYPE_CHECKING:
    from blockfs.shell import Shell

_PATH_COMMANDS = frozenset(
    {
        "cd",
        "create",
        "link",
        "ln",
        "ls",
        "mkdir",
        "open",
        "readlink",
        "rm",
        "rmdir",
        "stat",
        "symlink",
        "touch",
        "truncate",
        "unlink",
    }
)

_HANDLE_COMMANDS = frozenset({"close", "read", "seek", "write"})


class Completer:
    """Suggests commands, paths, and open handles for a shell."""

    def __init__(self, shell: Shell) -> None:
        """Complete against *shell* and the engine behind it."""
        self._shell = shell

    def complete(self, text: str, state: int) -> str | None:
        """Return the *state*-th match for *text*, or None past the last one.

        readline calls this with state 0, 1, 2, ... until it gets None.
        """
        matches = self.candidates(text, readline.get_line_buffer())
        return matches[state] if state < len(matches) else None

    def candidates(self, text: str, line: str) -> list[str]:
        """Return the sorted matches for the word *text* within *line*."""
        words = line.split()
        typing_first_word = len(words) <= 1 and not line.endswith(" ")
        if typing_first_word:
            return [name for name in self._shell.command_names if name.startswith(text)]

        command = words[0]
        # Index of the word under the cursor, counting the command as 0.
        position = len(words) if line.endswith(" ") else len(words) - 1
        if command in _HANDLE_COMMANDS and position == 1:
            return self._handles(text)
        if command in _PATH_COMMANDS or text.startswith("/"):
            return self._paths(text)
        return []

    def _handles(self, text: str) -> list[str]:
        return [str(h) for h in sorted(self._shell.engine.handles()) if str(h).startswith(text)]

    def _paths(self, text: str) -> list[str]:
        # "/docs/re" lists "/docs/" and keeps names starting with "re".
        directory, _, prefix = text.rpartition("/")
        if text.startswith("/") or directory:
            directory += "/"
        try:
            listing = self._shell.engine.listdir(directory or None)
        except FsError:
            return []
        return sorted(
            directory + info.name + ("/" if info.file_type is FileType.DIRECTORY else "")
            for info in listing
            if info.name not in (SELF_NAME, PARENT_NAME) and info.name.startswith(prefix)
        )
