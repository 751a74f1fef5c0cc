#!/usr/bin/env python3
"""
Command registry and command result types.

Every command handler has the signature ``handler(args, flags, shell)``
and returns exactly one of the result variants below. Handlers report
user errors through ``Error`` and never raise for bad input.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Union, TYPE_CHECKING

from .command_parser import ParsedCommand

if TYPE_CHECKING:
    from .shell import Shell

logger = logging.getLogger(__name__)


@dataclass
class Success:
    """
    Output plus optional state changes.

    ``project`` is None to leave the current project alone, ``''`` to clear
    it, or a project name to select it.
    """
    output: str = ''
    cwd: Optional[str] = None
    view_path: Optional[str] = None
    url_path: Optional[str] = None
    project: Optional[str] = None
    external_url: Optional[str] = None


@dataclass
class Error:
    """A user-facing failure message."""
    message: str


@dataclass
class Silent:
    """State changes without output."""
    cwd: Optional[str] = None
    view_path: Optional[str] = None
    url_path: Optional[str] = None
    project: Optional[str] = None
    clear_screen: bool = False
    exit_editor: bool = False


@dataclass
class EnterEditor:
    """Open the read-only viewer on a file."""
    file_path: str
    content: str
    view_path: Optional[str] = None
    url_path: Optional[str] = None
    project: Optional[str] = None


CommandResult = Union[Success, Error, Silent, EnterEditor]
Handler = Callable[[List[str], Dict[str, Union[bool, str]], 'Shell'], CommandResult]


@dataclass
class Command:
    """A named command and its handler."""
    name: str
    description: str
    usage: str
    handler: Handler
    hidden: bool = False


class CommandRegistry:
    """
    Maps command names and aliases to commands.

    Aliases share the target's Command object, so ``unique_commands``
    can drop them by identity.
    """

    def __init__(self):
        self._commands: Dict[str, Command] = {}

    def register(self, command: Command) -> Command:
        self._commands[command.name] = command
        return command

    def alias(self, alias: str, target: str):
        """Make ``alias`` dispatch to the already registered ``target``."""
        if target not in self._commands:
            raise KeyError(f"cannot alias unknown command '{target}'")
        self._commands[alias] = self._commands[target]

    def get(self, name: str) -> Optional[Command]:
        return self._commands.get(name)

    def __contains__(self, name: str) -> bool:
        return name in self._commands

    def names(self) -> List[str]:
        """All registered names, aliases included, sorted."""
        return sorted(self._commands)

    def unique_commands(self) -> List[Command]:
        """Visible commands without aliases, sorted by name."""
        seen = set()
        unique = []
        for name in sorted(self._commands):
            command = self._commands[name]
            if command.hidden or id(command) in seen:
                continue
            if name != command.name:
                continue
            seen.add(id(command))
            unique.append(command)
        return unique

    def execute(self, parsed: ParsedCommand, shell: 'Shell') -> CommandResult:
        """Dispatch a parsed command."""
        if not parsed.name:
            return Silent()
        command = self._commands.get(parsed.name)
        if command is None:
            return Error(
                f"command not found: {parsed.name}. Type 'help' for available commands."
            )
        logger.debug('Dispatching %s', parsed)
        return command.handler(parsed.args, parsed.flags, shell)
