"""Tests for the shell module.

The shell is the command interpreter — it parses user input, dispatches
to engine operations, and returns string output.  Engine errors come
back as ``Error: ...`` strings instead of exceptions.
"""

import pytest

from blockfs.engine import FileSystemEngine
from blockfs.shell import Shell


def _shell() -> tuple[FileSystemEngine, Shell]:
    """Create a fresh engine and a shell driving it."""
    engine = FileSystemEngine()
    return engine, Shell(engine=engine)


class TestShellExecute:
    """Verify command parsing and dispatch."""

    def test_empty_command_returns_empty(self) -> None:
        """An empty command should produce no output."""
        _engine, shell = _shell()
        assert shell.execute("") == ""

    def test_whitespace_only_returns_empty(self) -> None:
        """Whitespace-only input should produce no output."""
        _engine, shell = _shell()
        assert shell.execute("   ") == ""

    def test_unknown_command_returns_error(self) -> None:
        """An unknown command should name itself in the error."""
        _engine, shell = _shell()
        assert shell.execute("foobar") == "Unknown command: foobar"

    def test_exit_returns_sentinel(self) -> None:
        """The exit command should return the EXIT sentinel."""
        _engine, shell = _shell()
        assert shell.execute("exit") == Shell.EXIT_SENTINEL

    def test_help_lists_commands(self) -> None:
        """Help should list every command."""
        _engine, shell = _shell()
        result = shell.execute("help")
        for name in ("mkfs", "open", "write", "symlink", "exit"):
            assert name in result

    def test_command_names_sorted(self) -> None:
        """command_names is sorted for display and completion."""
        _engine, shell = _shell()
        assert shell.command_names == sorted(shell.command_names)

    def test_engine_error_rendered(self) -> None:
        """FsError becomes an ``Error:`` line rather than an exception."""
        _engine, shell = _shell()
        assert shell.execute("stat /ghost") == "Error: Path not found: /ghost"

    def test_bad_number_rendered(self) -> None:
        """Non-numeric arguments produce a readable error."""
        _engine, shell = _shell()
        assert shell.execute("mkfs lots") == "Error: invalid descriptor count 'lots'"

    @pytest.mark.parametrize(
        "command",
        ["mkfs", "mkdir", "rmdir", "create", "symlink a", "link a", "ln -s a", "unlink",
         "readlink", "stat", "truncate f", "open", "close", "seek 0", "read 0", "write 0"],
    )
    def test_missing_arguments_show_usage(self, command: str) -> None:
        """Every command with required arguments explains itself."""
        _engine, shell = _shell()
        assert shell.execute(command).startswith("Usage:")


class TestNamespaceCommands:
    """Verify commands that shape the directory tree."""

    def test_mkfs(self) -> None:
        """mkfs reports the descriptor count and resets the tree."""
        engine, shell = _shell()
        shell.execute("create old")
        assert shell.execute("mkfs 10") == "Formatted with 10 descriptors."
        assert not engine.exists("/old")

    def test_mkdir_cd_pwd(self) -> None:
        """mkdir then cd moves the working directory."""
        _engine, shell = _shell()
        shell.execute("mkdir docs")
        shell.execute("cd docs")
        assert shell.execute("pwd") == "/docs"

    def test_cd_without_argument_goes_home(self) -> None:
        """A bare cd returns to the root."""
        _engine, shell = _shell()
        shell.execute("mkdir docs")
        shell.execute("cd docs")
        shell.execute("cd")
        assert shell.execute("pwd") == "/"

    def test_ls_output(self) -> None:
        """ls prints one tab-separated entry per line."""
        _engine, shell = _shell()
        shell.execute("create a.txt")
        lines = shell.execute("ls").splitlines()
        expected_lines = 3
        assert len(lines) == expected_lines
        assert lines[2].split("\t")[:2] == ["a.txt", "file"]

    def test_touch_is_create(self) -> None:
        """touch is an alias for create."""
        engine, shell = _shell()
        shell.execute("touch t")
        assert engine.exists("/t")

    def test_rmdir(self) -> None:
        """rmdir removes an empty directory."""
        engine, shell = _shell()
        shell.execute("mkdir d")
        assert shell.execute("rmdir d") == ""
        assert not engine.exists("/d")

    def test_stat_output(self) -> None:
        """stat shows type, links, size, and blocks."""
        _engine, shell = _shell()
        shell.execute("create f")
        result = shell.execute("stat f")
        assert "Type: file" in result
        assert "Links: 1" in result
        assert "Size: 0" in result
        assert "Blocks: 0" in result


class TestLinkCommands:
    """Verify link, ln, symlink, readlink, and unlink."""

    def test_link_bumps_count(self) -> None:
        """link adds a second name."""
        _engine, shell = _shell()
        shell.execute("create a")
        shell.execute("link a b")
        assert "Links: 2" in shell.execute("stat b")

    def test_ln_hard(self) -> None:
        """ln without -s makes a hard link."""
        _engine, shell = _shell()
        shell.execute("create a")
        shell.execute("ln a b")
        assert "Links: 2" in shell.execute("stat a")

    def test_ln_symbolic(self) -> None:
        """ln -s makes a symlink readable with readlink."""
        _engine, shell = _shell()
        shell.execute("create a")
        shell.execute("ln -s /a s")
        assert shell.execute("readlink s") == "/a"

    def test_symlink_shown_in_ls(self) -> None:
        """ls shows a symlink's target."""
        _engine, shell = _shell()
        shell.execute("symlink /x s")
        assert "s\tsymlink" in shell.execute("ls")
        assert "-> /x" in shell.execute("ls")

    def test_rm_is_unlink(self) -> None:
        """rm is an alias for unlink."""
        engine, shell = _shell()
        shell.execute("create a")
        shell.execute("rm a")
        assert not engine.exists("/a")


class TestFileCommands:
    """Verify open, write, seek, read, close, truncate, and lsof."""

    def test_full_cycle(self) -> None:
        """A file can be written and read back through the shell."""
        _engine, shell = _shell()
        shell.execute("create f")
        assert shell.execute("open f") == "handle 0"
        assert shell.execute("write 0 hello world") == "Wrote 11 bytes."
        shell.execute("seek 0 6")
        assert shell.execute("read 0 5") == "b'world'"
        assert shell.execute("close 0") == ""

    def test_read_shows_holes_as_zeros(self) -> None:
        """Unwritten bytes print as escaped NULs."""
        _engine, shell = _shell()
        shell.execute("create f")
        shell.execute("truncate f 2")
        shell.execute("open f")
        assert shell.execute("read 0 2") == "b'\\x00\\x00'"

    def test_lsof(self) -> None:
        """lsof lists open handles with slot and cursor."""
        engine, shell = _shell()
        assert shell.execute("lsof") == "No open handles."
        shell.execute("create f")
        shell.execute("open f")
        shell.execute("write 0 abc")
        lines = shell.execute("lsof").splitlines()
        slot = engine.handles()[0].slot
        assert lines[0].split() == ["HANDLE", "SLOT", "CURSOR"]
        assert lines[1].split() == ["0", str(slot), "3"]

    def test_bad_handle(self) -> None:
        """Operations on unknown handles report an error."""
        _engine, shell = _shell()
        assert shell.execute("read 5 1") == "Error: Bad file descriptor: 5"

    def test_dmesg_shows_log(self) -> None:
        """dmesg prints the engine's log lines."""
        _engine, shell = _shell()
        shell.execute("create f")
        assert "create f" in shell.execute("dmesg")
