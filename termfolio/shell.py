#!/usr/bin/env python3
"""
The termfolio shell: session state plus command chain execution.

A Shell owns cwd, view path, current project, editor mode and history.
Commands never touch that state directly; they return result variants
which the shell folds in before the next chain segment runs. Listeners
registered with ``subscribe`` receive an immutable ShellState snapshot
after every non-blank ``execute()`` and every ``exit_editor()``.
"""

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from .actions import Action, action_to_command
from .builtins import create_default_registry
from .command_parser import CommandParser, ParsedCommand
from .commands import (
    CommandRegistry, CommandResult,
    EnterEditor, Error, Silent, Success,
)
from .completion import CompletionEngine, CompletionResult, PATH_WORDS, PATH_PREFIXES
from .filesystem import Filesystem, FSNode

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EditorMode:
    file_path: str
    content: str


@dataclass(frozen=True)
class ShellState:
    cwd: str
    view_path: str
    current_project: Optional[str] = None
    editor_mode: Optional[EditorMode] = None
    history: Tuple[str, ...] = ()


@dataclass
class ExecuteResult:
    """Combined outcome of one command line."""
    output: str = ''
    url_path: Optional[str] = None
    error: bool = False
    should_clear: bool = False
    external_url: Optional[str] = None


Listener = Callable[[ShellState], None]


def _is_auto_cd_token(name: str) -> bool:
    return name.startswith(PATH_PREFIXES) or name in PATH_WORDS


class Shell:
    """
    Interactive shell session over a read-only filesystem.

    Usage:
        shell = create_shell()
        result = shell.execute('cd projects && ls')
        print(result.output)
    """

    def __init__(self, filesystem: Filesystem,
                 commands: Optional[CommandRegistry] = None,
                 completions: Optional[CompletionEngine] = None,
                 cwd: Optional[str] = None,
                 view_path: Optional[str] = None):
        self.filesystem = filesystem
        self.commands = commands if commands is not None else create_default_registry()
        self.completions = completions or CompletionEngine(filesystem, self.commands)
        self.parser = CommandParser()

        self._cwd = filesystem.normalize_path(cwd or filesystem.home)
        self._view_path = view_path or self._cwd
        self._current_project: Optional[str] = None
        self._editor_mode: Optional[EditorMode] = None
        self._history: List[str] = []
        self._listeners: List[Listener] = []

    # Read-only state

    @property
    def cwd(self) -> str:
        return self._cwd

    @property
    def view_path(self) -> str:
        return self._view_path

    @property
    def current_project(self) -> Optional[str]:
        return self._current_project

    @property
    def editor_mode(self) -> Optional[EditorMode]:
        return self._editor_mode

    @property
    def is_editor_mode(self) -> bool:
        return self._editor_mode is not None

    @property
    def history(self) -> Tuple[str, ...]:
        return tuple(self._history)

    @property
    def home(self) -> str:
        return self.filesystem.home

    @property
    def state(self) -> ShellState:
        return ShellState(
            cwd=self._cwd,
            view_path=self._view_path,
            current_project=self._current_project,
            editor_mode=self._editor_mode,
            history=tuple(self._history),
        )

    # Path helpers relative to cwd

    def normalize_path(self, path: str) -> str:
        return self.filesystem.normalize_path(path, self._cwd)

    def resolve_path(self, path: str) -> Optional[FSNode]:
        return self.filesystem.resolve_path(self.normalize_path(path))

    def resolve_path_with_symlinks(self, path: str) -> Tuple[Optional[FSNode], str]:
        return self.filesystem.resolve_path_with_symlinks(self.normalize_path(path))

    def list_directory(self, path: str = '.') -> Optional[List[FSNode]]:
        return self.filesystem.list_directory(self.normalize_path(path))

    def get_file_content(self, path: str) -> Optional[str]:
        return self.filesystem.get_file_content(self.resolve_path(path))

    # Subscriptions

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register ``listener``; the returned callable unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe():
            self.unsubscribe(listener)
        return unsubscribe

    def unsubscribe(self, listener: Listener):
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify(self):
        snapshot = self.state
        for listener in list(self._listeners):
            listener(snapshot)

    # Completion

    def complete(self, buffer: str) -> CompletionResult:
        return self.completions.complete(buffer, self._cwd)

    def get_completions(self, buffer: str) -> List[str]:
        return self.completions.get_completions(buffer, self._cwd)

    # Execution

    def execute(self, command_line: str) -> ExecuteResult:
        """
        Run a command line.

        Blank input is ignored entirely: no history entry and no
        notification. Otherwise segments run left to right; a segment
        after ``&&`` is skipped when the previous segment failed.
        """
        line = command_line.strip()
        if not line:
            return ExecuteResult()

        self._history.append(line)
        combined = ExecuteResult()
        outputs = []
        failed = False
        previous_op = None

        for segment, op in self.parser.parse(line).segments:
            if previous_op == '&&' and failed:
                logger.debug('Skipping %r after failure', segment)
                previous_op = op
                continue
            previous_op = op

            parsed = self.parser.parse_command(segment)
            result = self._dispatch(parsed)
            failed = self._apply(result, combined)
            if isinstance(result, (Success, Error)):
                text = result.output if isinstance(result, Success) else result.message
                if text:
                    outputs.append(text)

        combined.output = '\n'.join(outputs)
        combined.error = failed
        self._notify()
        return combined

    def dispatch(self, action: Action) -> ExecuteResult:
        """Run a UI action as the command line it stands for."""
        projects = self.filesystem.projects_path or 'projects'
        return self.execute(action_to_command(action, projects))

    def exit_editor(self):
        """Leave editor mode and notify listeners."""
        self._editor_mode = None
        self._notify()

    def _dispatch(self, parsed: ParsedCommand) -> CommandResult:
        if parsed.name not in self.commands and _is_auto_cd_token(parsed.name):
            return self._auto_cd(parsed.name)
        logger.debug('Executing %s', parsed)
        return self.commands.execute(parsed, self)

    def _auto_cd(self, token: str) -> CommandResult:
        node = self.resolve_path(token)
        if node is None:
            return Error(f"{token}: no such file or directory")
        if not node.is_dir():
            return Error(f"{token}: not a directory")
        logger.debug('Auto cd to %s', token)
        return self.commands.execute(ParsedCommand(name='cd', args=[token]), self)

    def _apply(self, result: CommandResult, combined: ExecuteResult) -> bool:
        """Fold a command result into session state; return True on error."""
        if isinstance(result, Error):
            return True

        if isinstance(result, Success):
            self._apply_navigation(result.cwd, result.view_path, result.project)
            if result.external_url is not None:
                combined.external_url = result.external_url
        elif isinstance(result, Silent):
            self._apply_navigation(result.cwd, result.view_path, result.project)
            if result.clear_screen:
                combined.should_clear = True
            if result.exit_editor:
                self._editor_mode = None
        elif isinstance(result, EnterEditor):
            self._apply_navigation(None, result.view_path, result.project)
            self._editor_mode = EditorMode(result.file_path, result.content)
        else:
            raise TypeError(f'command returned {type(result).__name__}, not a command result')

        if result.url_path is not None:
            combined.url_path = result.url_path
        return False

    def _apply_navigation(self, cwd: Optional[str], view_path: Optional[str],
                          project: Optional[str]):
        if cwd is not None:
            self._cwd = cwd
        if view_path is not None:
            self._view_path = view_path
        if project is not None:
            self._current_project = project or None


def create_shell(filesystem: Optional[Filesystem] = None,
                 cwd: Optional[str] = None) -> Shell:
    """A shell wired with the built-in commands and completers."""
    return Shell(filesystem or Filesystem.default(), cwd=cwd)
