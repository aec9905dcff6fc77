"""Command execution for package build scripts."""

from __future__ import annotations

import os
import shlex
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Sequence


@dataclass
class CommandResult:
    """Outcome of an executed command."""

    command: Sequence[str]
    returncode: int
    cwd: Optional[Path] = None


def format_command(command: Sequence[str]) -> str:
    return " ".join(shlex.quote(part) for part in command)


class CommandRunner:
    """Abstract command runner interface."""

    def run(
        self,
        command: Sequence[str],
        *,
        cwd: Path | None = None,
        env: Mapping[str, str] | None = None,
    ) -> CommandResult:
        raise NotImplementedError


class SubprocessCommandRunner(CommandRunner):
    """Runs commands with inherited stdio and waits for them to exit."""

    def __init__(self, base_env: Mapping[str, str] | None = None) -> None:
        self._base_env = base_env

    def run(
        self,
        command: Sequence[str],
        *,
        cwd: Path | None = None,
        env: Mapping[str, str] | None = None,
    ) -> CommandResult:
        merged_env: Dict[str, str] = dict(
            os.environ if self._base_env is None else self._base_env
        )
        if env:
            merged_env.update(env)
        try:
            process = subprocess.run(
                list(command),
                cwd=str(cwd) if cwd else None,
                env=merged_env,
                check=False,
            )
        except FileNotFoundError:
            # Same status a shell reports for an unknown command.
            return CommandResult(command=command, returncode=127, cwd=cwd)
        return CommandResult(command=command, returncode=process.returncode, cwd=cwd)


@dataclass
class RecordedCommand:
    command: List[str]
    cwd: Optional[Path]
    env: Dict[str, str] = field(default_factory=dict)


class RecordingCommandRunner(CommandRunner):
    """Records commands instead of executing them."""

    def __init__(self, returncode: int = 0) -> None:
        self.commands: List[RecordedCommand] = []
        self._returncode = returncode

    def run(
        self,
        command: Sequence[str],
        *,
        cwd: Path | None = None,
        env: Mapping[str, str] | None = None,
    ) -> CommandResult:
        self.commands.append(
            RecordedCommand(command=list(command), cwd=cwd, env=dict(env or {}))
        )
        return CommandResult(command=command, returncode=self._returncode, cwd=cwd)


__all__ = [
    "CommandResult",
    "CommandRunner",
    "RecordedCommand",
    "RecordingCommandRunner",
    "SubprocessCommandRunner",
    "format_command",
]
