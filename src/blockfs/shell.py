"""The shell — a command interpreter over a file system engine.

The shell reads a command string, splits it into a command name and
arguments, dispatches to the matching handler, and returns a string
result.  It never prints: the caller decides how to display output,
which keeps every command testable.

Commands map one-to-one onto engine operations (``mkfs``, ``mkdir``,
``create``, ``open``, ``write``, ...), plus a few conveniences
(``touch``, ``rm``, ``ln -s``, ``lsof``, ``dmesg``).  Any ``FsError``
an engine call raises is rendered as ``Error: <message>``.
"""

from collections.abc import Callable

from blockfs.engine import FileSystemEngine
from blockfs.errors import FsError, InvalidArgumentError

# Type alias for a command handler: takes a list of args, returns output.
type _Handler = Callable[[list[str]], str]


def _parse_int(value: str, what: str) -> int:
    """Parse a numeric argument or raise an InvalidArgumentError."""
    try:
        return int(value)
    except ValueError:
        msg = f"invalid {what} '{value}'"
        raise InvalidArgumentError(msg) from None


class Shell:
    """Command interpreter attached to one engine."""

    EXIT_SENTINEL = "__EXIT__"

    def __init__(self, *, engine: FileSystemEngine) -> None:
        """Create a shell driving *engine*."""
        self._engine = engine

        # Command name -> handler.
        self._commands: dict[str, _Handler] = {
            "help": self._cmd_help,
            "exit": self._cmd_exit,
            "mkfs": self._cmd_mkfs,
            "mkdir": self._cmd_mkdir,
            "rmdir": self._cmd_rmdir,
            "create": self._cmd_create,
            "touch": self._cmd_create,
            "symlink": self._cmd_symlink,
            "ln": self._cmd_ln,
            "link": self._cmd_link,
            "unlink": self._cmd_unlink,
            "rm": self._cmd_unlink,
            "readlink": self._cmd_readlink,
            "cd": self._cmd_cd,
            "pwd": self._cmd_pwd,
            "ls": self._cmd_ls,
            "stat": self._cmd_stat,
            "truncate": self._cmd_truncate,
            "open": self._cmd_open,
            "close": self._cmd_close,
            "seek": self._cmd_seek,
            "read": self._cmd_read,
            "write": self._cmd_write,
            "lsof": self._cmd_lsof,
            "dmesg": self._cmd_dmesg,
        }

    @property
    def engine(self) -> FileSystemEngine:
        """Return the engine this shell drives."""
        return self._engine

    @property
    def command_names(self) -> list[str]:
        """Return the sorted list of command names."""
        return sorted(self._commands)

    def execute(self, command: str) -> str:
        """Parse and execute one command.

        Args:
            command: The raw command string (e.g. "seek 0 256").

        Returns:
            The command output, ``Error: ...`` on failure, or
            ``EXIT_SENTINEL`` for ``exit``.

        """
        parts = command.strip().split()
        if not parts:
            return ""

        name = parts[0]
        handler = self._commands.get(name)
        if handler is None:
            return f"Unknown command: {name}"

        try:
            return handler(parts[1:])
        except FsError as e:
            return f"Error: {e}"

    # -- Command handlers ----------------------------------------------------

    def _cmd_help(self, _args: list[str]) -> str:
        """List available commands."""
        return "Available commands: " + ", ".join(self.command_names)

    def _cmd_exit(self, _args: list[str]) -> str:
        """Leave the shell."""
        return self.EXIT_SENTINEL

    def _cmd_mkfs(self, args: list[str]) -> str:
        """Format with the given number of descriptors."""
        if not args:
            return "Usage: mkfs <descriptors>"
        count = _parse_int(args[0], "descriptor count")
        self._engine.mkfs(count)
        return f"Formatted with {count} descriptors."

    def _cmd_mkdir(self, args: list[str]) -> str:
        if not args:
            return "Usage: mkdir <path>"
        self._engine.mkdir(args[0])
        return ""

    def _cmd_rmdir(self, args: list[str]) -> str:
        if not args:
            return "Usage: rmdir <path>"
        self._engine.rmdir(args[0])
        return ""

    def _cmd_create(self, args: list[str]) -> str:
        if not args:
            return "Usage: create <path>"
        self._engine.create(args[0])
        return ""

    def _cmd_symlink(self, args: list[str]) -> str:
        min_args = 2
        if len(args) < min_args:
            return "Usage: symlink <target> <link_name>"
        self._engine.symlink(args[0], args[1])
        return ""

    def _cmd_link(self, args: list[str]) -> str:
        min_args = 2
        if len(args) < min_args:
            return "Usage: link <existing> <new_name>"
        self._engine.link(args[0], args[1])
        return ""

    def _cmd_ln(self, args: list[str]) -> str:
        """Create a hard or symbolic link.

        ``ln <target> <link>``     → hard link
        ``ln -s <target> <link>``  → symbolic link
        """
        symbolic = args[0] == "-s" if args else False
        actual_args = args[1:] if symbolic else args

        min_args = 2
        if len(actual_args) < min_args:
            return "Usage: ln [-s] <target> <link_name>"
        if symbolic:
            self._engine.symlink(actual_args[0], actual_args[1])
        else:
            self._engine.link(actual_args[0], actual_args[1])
        return ""

    def _cmd_unlink(self, args: list[str]) -> str:
        if not args:
            return "Usage: unlink <path>"
        self._engine.unlink(args[0])
        return ""

    def _cmd_readlink(self, args: list[str]) -> str:
        if not args:
            return "Usage: readlink <path>"
        return self._engine.readlink(args[0])

    def _cmd_cd(self, args: list[str]) -> str:
        """Change directory (to / when no argument is given)."""
        self._engine.cd(args[0] if args else "/")
        return ""

    def _cmd_pwd(self, _args: list[str]) -> str:
        return self._engine.pwd()

    def _cmd_ls(self, args: list[str]) -> str:
        """List directory contents, one entry per line."""
        listing = self._engine.ls(args[0] if args else None)
        return "\n".join(str(info) for info in listing)

    def _cmd_stat(self, args: list[str]) -> str:
        if not args:
            return "Usage: stat <path>"
        info = self._engine.stat(args[0])
        return "\n".join(
            [
                f"  File: {args[0]}",
                f"  Type: {info.file_type}",
                f"    Id: {info.id}",
                f" Links: {info.link_count}",
                f"  Size: {info.size}",
                f"Blocks: {info.block_count}",
            ]
        )

    def _cmd_truncate(self, args: list[str]) -> str:
        min_args = 2
        if len(args) < min_args:
            return "Usage: truncate <path> <size>"
        self._engine.truncate(args[0], _parse_int(args[1], "size"))
        return ""

    def _cmd_open(self, args: list[str]) -> str:
        if not args:
            return "Usage: open <path>"
        handle = self._engine.open(args[0])
        return f"handle {handle}"

    def _cmd_close(self, args: list[str]) -> str:
        if not args:
            return "Usage: close <handle>"
        self._engine.close(_parse_int(args[0], "handle"))
        return ""

    def _cmd_seek(self, args: list[str]) -> str:
        min_args = 2
        if len(args) < min_args:
            return "Usage: seek <handle> <offset>"
        self._engine.seek(_parse_int(args[0], "handle"), _parse_int(args[1], "offset"))
        return ""

    def _cmd_read(self, args: list[str]) -> str:
        """Read bytes and show them as a bytes literal (holes show as \\x00)."""
        min_args = 2
        if len(args) < min_args:
            return "Usage: read <handle> <count>"
        data = self._engine.read(_parse_int(args[0], "handle"), _parse_int(args[1], "count"))
        return repr(data)

    def _cmd_write(self, args: list[str]) -> str:
        """Write the remaining words (space-joined, UTF-8) at the cursor."""
        min_args = 2
        if len(args) < min_args:
            return "Usage: write <handle> <text>"
        written = self._engine.write(_parse_int(args[0], "handle"), " ".join(args[1:]).encode())
        return f"Wrote {written} bytes."

    def _cmd_lsof(self, _args: list[str]) -> str:
        """List open handles with their descriptor slot and cursor."""
        handles = self._engine.handles()
        if not handles:
            return "No open handles."
        lines = ["HANDLE  SLOT  CURSOR"]
        lines.extend(
            f"{handle:<7} {entry.slot:<5} {entry.cursor}" for handle, entry in handles.items()
        )
        return "\n".join(lines)

    def _cmd_dmesg(self, _args: list[str]) -> str:
        """Show the engine's status log."""
        return "\n".join(self._engine.logger.lines())
