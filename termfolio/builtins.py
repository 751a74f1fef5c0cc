#!/usr/bin/env python3
"""
Built-in commands of the termfolio shell.

Handlers receive ``(args, flags, shell)`` and return a result variant
from ``termfolio.commands``. Paths are interpreted relative to the
shell's cwd and follow symlinks.
"""

from typing import Dict, List, Optional, Union

from .commands import (
    Command, CommandRegistry, CommandResult,
    EnterEditor, Error, Silent, Success,
)
from .filesystem import FSNode, Filesystem

Flags = Dict[str, Union[bool, str]]

EDITOR_EXIT_COMMANDS = (':q', ':q!', ':wq')

HELP_TIPS = [
    'Use Tab for autocomplete',
    'Use Up/Down arrows for command history',
    'Type a directory path on its own to cd into it',
    'Inside vim, type :q to exit',
]


def _flag(flags: Flags, *names: str) -> bool:
    return any(flags.get(name) for name in names)


def _dir_url(fs: Filesystem, actual_path: str) -> str:
    """Route hint for a directory: the projects listing, a project, or root."""
    projects = fs.projects_path
    if projects:
        if actual_path == projects:
            return '/projects'
        if actual_path.startswith(projects + '/'):
            name = actual_path[len(projects) + 1:].split('/')[0]
            return f'/projects/{name}'
    return '/'


def _file_route(fs: Filesystem, actual_path: str):
    """(url_path, project) for a file; project is None when unrelated."""
    project = fs.project_for_path(actual_path)
    if project:
        return f'/projects/{project}', project
    if fs.profile_path and actual_path == fs.profile_path:
        return '/about', None
    return None, None


def cd(args: List[str], flags: Flags, shell) -> CommandResult:
    """
    Change the working directory.

    Usage: cd [path]

    With no argument, returns to the home directory. Symlinks are followed
    and the cwd becomes the link target's canonical path.
    """
    if not args:
        return Silent(cwd=shell.home, view_path=shell.home, url_path='/', project='')

    raw = args[0]
    node, actual = shell.resolve_path_with_symlinks(raw)
    if node is None:
        return Error(f"cd: {raw}: No such file or directory")
    if not node.is_dir():
        return Error(f"cd: {raw}: Not a directory")

    return Silent(
        cwd=actual,
        view_path=actual,
        url_path=_dir_url(shell.filesystem, actual),
        project='',
    )


def _ls_name(node: FSNode) -> str:
    if node.is_dir():
        return node.name + '/'
    if node.is_executable():
        return node.name + '*'
    if node.is_symlink():
        return node.name + '@'
    return node.name


def _ls_long(node: FSNode) -> str:
    if node.is_dir():
        perms = 'drwxr-xr-x'
    elif node.is_executable():
        perms = '-rwxr-xr-x'
    elif node.is_symlink():
        perms = 'lrwxrwxrwx'
    else:
        perms = '-rw-r--r--'
    name = _ls_name(node)
    if node.is_symlink():
        name = f'{node.name} -> {node.target}'
    return f'{perms}  guest  guest  {name}'


def ls(args: List[str], flags: Flags, shell) -> CommandResult:
    """
    List directory contents.

    Usage: ls [-l] [-a] [path]

    Options:
        -l, --long    Long listing with permissions
        -a, --all     Include entries starting with '.'
    """
    long_format = _flag(flags, 'l', 'long')
    show_all = _flag(flags, 'a', 'all')

    raw = args[0] if args else '.'
    node, actual = shell.resolve_path_with_symlinks(raw)
    if node is None:
        return Error(f"ls: {raw}: No such file or directory")

    if not node.is_dir():
        return Success(_ls_long(node) if long_format else node.name)

    entries = [child for child in shell.filesystem.list_directory(actual)
               if show_all or not child.is_hidden()]
    if not entries:
        return Success('(empty directory)')

    if long_format:
        output = '\n'.join(_ls_long(child) for child in entries)
    else:
        output = '  '.join(_ls_name(child) for child in entries)
    return Success(output)


def cat(args: List[str], flags: Flags, shell) -> CommandResult:
    """
    Print file contents.

    Usage: cat <file>...
    """
    if not args:
        return Error("cat: missing operand")

    fs = shell.filesystem
    contents = []
    actual = None
    for raw in args:
        node, actual = shell.resolve_path_with_symlinks(raw)
        if node is None:
            return Error(f"cat: {raw}: No such file or directory")
        if node.is_dir():
            return Error(f"cat: {raw}: Is a directory")
        contents.append(fs.get_file_content(node).rstrip('\n'))

    url_path, project = _file_route(fs, actual)
    return Success('\n'.join(contents), view_path=actual,
                   url_path=url_path, project=project)


def vim(args: List[str], flags: Flags, shell) -> CommandResult:
    """
    Open a file in the read-only viewer.

    Usage: vim <file>
    """
    if not args:
        return Error("vim: missing file operand")

    raw = args[0]
    path = shell.normalize_path(raw)
    node, actual = shell.resolve_path_with_symlinks(raw)
    if node is None:
        return Error(f"vim: {raw}: No such file or directory")
    if node.is_dir():
        return Error(f"vim: {raw}: Is a directory")

    fs = shell.filesystem
    url_path, project = _file_route(fs, actual)
    return EnterEditor(
        file_path=path,
        content=fs.get_file_content(node),
        view_path=actual,
        url_path=url_path,
        project=project,
    )


def _editor_exit(name: str):
    def handler(args: List[str], flags: Flags, shell) -> CommandResult:
        if not shell.is_editor_mode:
            return Error(f"E492: Not an editor command: {name.lstrip(':')}")
        return Silent(exit_editor=True)
    return handler


def help_command(args: List[str], flags: Flags, shell) -> CommandResult:
    """Show visible commands with usage and description."""
    commands = shell.commands.unique_commands()
    width = max([len(c.usage) for c in commands] + [14]) + 2
    lines = ['Available commands:', '']
    lines.extend(f'  {c.usage.ljust(width)}{c.description}' for c in commands)
    lines.extend(['', 'Tips:'])
    lines.extend(f'  - {tip}' for tip in HELP_TIPS)
    return Success('\n'.join(lines))


def history(args: List[str], flags: Flags, shell) -> CommandResult:
    entries = shell.history
    if not entries:
        return Success('No commands in history.')
    return Success('\n'.join(
        f'  {index:>3}  {line}' for index, line in enumerate(entries, 1)
    ))


def clear(args: List[str], flags: Flags, shell) -> CommandResult:
    return Silent(clear_screen=True)


def whoami(args: List[str], flags: Flags, shell) -> CommandResult:
    fs = shell.filesystem
    name = fs.profile.name if fs.profile else 'guest'
    return Success(name, view_path=fs.profile_path, url_path='/about')


def open_command(args: List[str], flags: Flags, shell) -> CommandResult:
    """
    Open a project's page in the browser.

    Usage: open [project]

    Without an argument the current project is used.
    """
    name: Optional[str] = args[0] if args else shell.current_project
    if not name:
        return Error("open: no project specified. Usage: open <project-name>")

    if name.endswith('.md'):
        name = name[:-3]
    project = shell.filesystem.get_project(name)
    if project is None:
        return Error(f"open: {name}: No such file or directory")

    url = project.url or project.homepage
    if not url:
        return Error(f"open: {name}: project has no URL")
    return Success(f"Opening {url}...", external_url=url, project=name)


def pwd(args: List[str], flags: Flags, shell) -> CommandResult:
    return Success(shell.cwd)


def register_builtins(registry: CommandRegistry) -> CommandRegistry:
    """Register every built-in command on ``registry``."""
    registry.register(Command('cd', 'Change directory', 'cd [path]', cd))
    registry.register(Command('ls', 'List directory contents', 'ls [-l] [-a] [path]', ls))
    registry.register(Command('cat', 'Print file contents', 'cat <file>', cat))
    registry.register(Command('vim', 'View a file (read-only)', 'vim <file>', vim))
    registry.alias('vi', 'vim')
    for name in EDITOR_EXIT_COMMANDS:
        registry.register(Command(name, 'Exit the viewer', name,
                                  _editor_exit(name), hidden=True))
    registry.register(Command('help', 'Show this help message', 'help', help_command))
    registry.register(Command('history', 'Show command history', 'history', history))
    registry.register(Command('clear', 'Clear the terminal', 'clear', clear))
    registry.register(Command('whoami', 'Display profile information', 'whoami', whoami))
    registry.register(Command('open', 'Open project in the browser', 'open [project]',
                              open_command))
    registry.register(Command('pwd', 'Print working directory', 'pwd', pwd))
    return registry


def create_default_registry() -> CommandRegistry:
    return register_builtins(CommandRegistry())
