#!/usr/bin/env python3
"""
UI actions translated into shell command lines.

A front end such as a menu or link describes what the visitor wants as an
Action; the shell only ever sees ordinary command text, so every action
is replayable from the prompt and lands in history like typed input.

Design Principles:
- Actions carry intent, never results
- Command text is built by small helpers and chained with ``&&``
- Arguments are shell-quoted so names with spaces survive tokenizing
"""

import logging
import shlex
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar('T')


class ActionType(str, Enum):
    NAVIGATE = 'navigate'
    NAVIGATE_BACK = 'navigate_back'
    NAVIGATE_ROOT = 'navigate_root'
    NAVIGATE_HOME = 'navigate_home'
    OPEN_FILE = 'open_file'
    VIEW_FILE = 'view_file'
    LIST_DIR = 'list_dir'
    OPEN_PROJECT = 'open_project'
    LIST_PROJECTS = 'list_projects'
    CLEAR = 'clear'
    SHOW_HELP = 'show_help'
    SHOW_HISTORY = 'show_history'


@dataclass(frozen=True)
class Action:
    """
    A visitor intent.

    ``path`` is used by NAVIGATE, OPEN_FILE and VIEW_FILE, ``name`` by
    OPEN_PROJECT and ``flags`` (such as ``-la``) by LIST_DIR.
    """
    type: ActionType
    path: Optional[str] = None
    name: Optional[str] = None
    flags: Optional[str] = None


# Command builders

def cd(path: str) -> str:
    return f'cd {shlex.quote(path)}'


def vim(path: str) -> str:
    return f'vim {shlex.quote(path)}'


def cat(path: str) -> str:
    return f'cat {shlex.quote(path)}'


def ls(flags: Optional[str] = None) -> str:
    return f'ls {flags}' if flags else 'ls'


def open_project(name: Optional[str] = None) -> str:
    return f'open {shlex.quote(name)}' if name else 'open'


def chain(*commands: str) -> str:
    return ' && '.join(commands)


def _required(action: Action, attr: str) -> str:
    value = getattr(action, attr)
    if not value:
        raise ValueError(f'{ActionType(action.type).value}: missing {attr}')
    return value


def action_to_command(action: Action, projects_path: str = 'projects') -> str:
    """
    Translate an action into a command line.

    ``projects_path`` is where project pages live; relative values are
    taken from the shell's current directory when the line runs.

    Raises:
        ValueError: If the action lacks the field its type needs.
    """
    kind = ActionType(action.type)

    if kind == ActionType.NAVIGATE:
        return chain(cd(_required(action, 'path')), ls())
    if kind == ActionType.NAVIGATE_BACK:
        return chain(cd('..'), ls())
    if kind == ActionType.NAVIGATE_ROOT:
        return chain(cd('/'), ls())
    if kind == ActionType.NAVIGATE_HOME:
        return chain('cd ~', ls())
    if kind == ActionType.OPEN_FILE:
        return vim(_required(action, 'path'))
    if kind == ActionType.VIEW_FILE:
        return cat(_required(action, 'path'))
    if kind == ActionType.LIST_DIR:
        return ls(action.flags)
    if kind == ActionType.OPEN_PROJECT:
        return chain(cd(projects_path), vim(f"{_required(action, 'name')}.md"))
    if kind == ActionType.LIST_PROJECTS:
        return chain(cd(projects_path), ls())
    if kind == ActionType.CLEAR:
        return 'clear'
    if kind == ActionType.SHOW_HELP:
        return 'help'
    return 'history'


def create_action_dispatcher(execute: Callable[[str], T],
                             projects_path: str = 'projects') -> Callable[[Action], T]:
    """Wrap an ``execute(command)`` callable so it accepts actions."""
    def dispatch(action: Action) -> T:
        command = action_to_command(action, projects_path)
        logger.debug('Action %s -> %r', ActionType(action.type).value, command)
        return execute(command)
    return dispatch
