"""Shell command execution."""

import os
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional, Union

from ..utils.logger import Logger, console
from ..utils.errors import CommandError


@dataclass
class CommandResult:
    """Outcome of a finished shell command."""
    command: str
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    @property
    def output(self) -> str:
        """Combined stdout and stderr, trimmed."""
        return "\n".join(part for part in (self.stdout.strip(), self.stderr.strip()) if part)


def _trim_ellipsis(message: str) -> str:
    return message[:-3] if message.endswith("...") else message


class CommandRunner:
    """Runs commands through the system shell.

    Every mode reports failure through its return value except
    ``run_capture_or_raise``; nothing is retried.
    """

    def __init__(
        self,
        cwd: Optional[Union[str, Path]] = None,
        env: Optional[Dict[str, str]] = None
    ):
        self.cwd = str(cwd) if cwd else None
        self.env = env

    def _environ(self, extra: Optional[Dict[str, str]]) -> Optional[Dict[str, str]]:
        if not self.env and not extra:
            return None
        merged = dict(os.environ)
        merged.update(self.env or {})
        merged.update(extra or {})
        return merged

    def run_checked(
        self,
        command: str,
        timeout: Optional[float] = None,
        env: Optional[Dict[str, str]] = None,
        capture: bool = True
    ) -> CommandResult:
        """Run a command and return its full result.

        Timeouts and spawn failures are folded into a non-zero return code.
        """
        Logger.debug(f"$ {command}")
        try:
            proc = subprocess.run(
                command,
                shell=True,
                cwd=self.cwd,
                env=self._environ(env),
                capture_output=capture,
                text=True,
                timeout=timeout
            )
        except subprocess.TimeoutExpired:
            Logger.debug(f"Timed out after {timeout}s: {command}")
            return CommandResult(command, 124, "", f"timed out after {timeout}s")
        except OSError as e:
            Logger.debug(f"Could not spawn '{command}': {e}")
            return CommandResult(command, 127, "", str(e))

        return CommandResult(
            command,
            proc.returncode,
            proc.stdout or "",
            proc.stderr or ""
        )

    def run_silent(self, command: str, timeout: Optional[float] = None) -> bool:
        """Run a command, discarding its output."""
        return self.run_checked(command, timeout=timeout).ok

    def run_capture(
        self,
        command: str,
        timeout: Optional[float] = None,
        env: Optional[Dict[str, str]] = None
    ) -> Optional[str]:
        """Run a command and return trimmed stdout, or None on failure."""
        result = self.run_checked(command, timeout=timeout, env=env)
        if not result.ok:
            return None
        return result.stdout.strip()

    def run_capture_or_raise(self, command: str, message: str) -> str:
        """Run a command and return trimmed stdout; raise CommandError on failure."""
        result = self.run_checked(command)
        if not result.ok:
            Logger.fail(message)
            raise CommandError(message, command=command, stderr=result.stderr.strip())
        return result.stdout.strip()

    def run_with_status(self, command: str, message: str) -> bool:
        """Run a command behind a status line, hiding its output."""
        with console.status(message):
            result = self.run_checked(command)
        if result.ok:
            Logger.success(_trim_ellipsis(message))
        else:
            Logger.fail(f"Failed: {_trim_ellipsis(message)}")
            if result.stderr.strip():
                Logger.debug(result.stderr.strip())
        return result.ok

    def run_visible(self, command: str, message: str) -> bool:
        """Run a command with its output shown to the user."""
        Logger.start(message)
        result = self.run_checked(command, capture=False)
        if result.ok:
            Logger.success(_trim_ellipsis(message))
        else:
            Logger.fail(f"Failed: {_trim_ellipsis(message)}")
        return result.ok


def clear_terminal():
    """Clear the screen and move the cursor home."""
    console.file.write("\x1b[2J\x1b[H")
    console.file.flush()


def clear_lines(count: int):
    """Erase the last ``count`` lines of output."""
    for _ in range(count):
        console.file.write("\x1b[1A\x1b[2K")
    console.file.flush()
