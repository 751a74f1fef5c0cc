"""
termfolio - A portfolio you browse like a shell

This package provides a read-only virtual filesystem with symlinks, a small
command interpreter with ``&&``/``;`` chaining, Zsh-style tab completion and
a vim-like read-only file viewer.
"""

__version__ = "0.1.0"

from .filesystem import (
    Filesystem,
    FSNode,
    NodeType,
    Project,
    Profile,
    DynamicRecords,
    SeedError,
    build_filesystem,
)

from .command_parser import (
    CommandParser,
    CommandChain,
    ParsedCommand,
)

from .commands import (
    Command,
    CommandRegistry,
    Success,
    Error,
    Silent,
    EnterEditor,
)

from .builtins import create_default_registry

from .completion import (
    CompletionEngine,
    CompletionContext,
    CompletionResult,
    create_context,
    common_prefix,
)

from .menu_complete import (
    MenuComplete,
    MenuCompleteResult,
    MenuDisplay,
    MenuState,
)

from .shell import (
    Shell,
    ShellState,
    EditorMode,
    ExecuteResult,
    create_shell,
)

from .vim import (
    VimViewer,
    VimView,
    VimState,
    StatusLine,
)

from .actions import (
    Action,
    ActionType,
    action_to_command,
    create_action_dispatcher,
)

from .line_editor import (
    LineBuffer,
    LineEditor,
)

from .terminal import (
    TerminalSession,
    TerminalConfig,
)

__all__ = [
    # Filesystem
    "Filesystem",
    "FSNode",
    "NodeType",
    "Project",
    "Profile",
    "DynamicRecords",
    "SeedError",
    "build_filesystem",

    # Command parser
    "CommandParser",
    "CommandChain",
    "ParsedCommand",

    # Commands
    "Command",
    "CommandRegistry",
    "Success",
    "Error",
    "Silent",
    "EnterEditor",
    "create_default_registry",

    # Completion
    "CompletionEngine",
    "CompletionContext",
    "CompletionResult",
    "create_context",
    "common_prefix",
    "MenuComplete",
    "MenuCompleteResult",
    "MenuDisplay",
    "MenuState",

    # Shell
    "Shell",
    "ShellState",
    "EditorMode",
    "ExecuteResult",
    "create_shell",

    # Actions
    "Action",
    "ActionType",
    "action_to_command",
    "create_action_dispatcher",

    # Viewer
    "VimViewer",
    "VimView",
    "VimState",
    "StatusLine",

    # Terminal
    "LineBuffer",
    "LineEditor",
    "TerminalSession",
    "TerminalConfig",

    # Version info
    "__version__",
]
