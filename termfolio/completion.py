#!/usr/bin/env python3
"""
Zsh-style completion engine.

Completion runs two completers in order and the first non-empty result
wins:

1. ``_commands`` completes the command name (first word only).
2. ``_arguments`` looks the command up in the compdef table and runs the
   completer registered for it (``_paths``, ``_files``, ``_projects``).

Only the last chain segment of the buffer is considered, so
``cd a && vim RE<Tab>`` completes ``RE`` as a ``vim`` argument.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Optional, Union

from .command_parser import last_segment
from .filesystem import Filesystem

logger = logging.getLogger(__name__)

PATH_PREFIXES = ('./', '../', '~/', '/')
PATH_WORDS = ('.', '..', '~')
SPECIAL_ENTRIES = ('~/', './', '../', '/')

Completer = Callable[[str, str], List[str]]

DEFAULT_COMPDEF = {
    'cd': '_paths',
    'vim': '_files',
    'vi': '_files',
    'cat': '_files',
    'ls': '_files',
    'open': '_projects',
}

PATH_COMPLETERS = ('_paths', '_files')


def looks_like_path(word: str) -> bool:
    return word.startswith(PATH_PREFIXES) or word in PATH_WORDS


def common_prefix(strings: List[str]) -> str:
    """Longest prefix shared by every string, or '' for fewer than two."""
    if len(strings) < 2:
        return ''
    shortest = min(strings, key=len)
    for i, char in enumerate(shortest):
        if any(s[i] != char for s in strings):
            return shortest[:i]
    return shortest


@dataclass
class CompletionContext:
    """The word under the cursor and its position in the segment."""
    buffer: str
    words: List[str]
    current: int
    prefix: str
    cwd: str

    @property
    def command(self) -> Optional[str]:
        return self.words[0] if self.words else None


@dataclass
class CompletionResult:
    completions: List[str] = field(default_factory=list)
    type: Optional[str] = None
    common_prefix: str = ''

    def __bool__(self) -> bool:
        return bool(self.completions)


def create_context(buffer: str, cwd: str) -> CompletionContext:
    """Split the last chain segment of ``buffer`` into words."""
    segment = last_segment(buffer)
    words = segment.lstrip().split()
    ends_with_space = bool(segment) and segment[-1].isspace()
    if ends_with_space:
        current = len(words)
        prefix = ''
    else:
        current = max(0, len(words) - 1)
        prefix = words[current] if words else ''
    return CompletionContext(buffer=buffer, words=words, current=current,
                             prefix=prefix, cwd=cwd)


class CompletionEngine:
    """
    Completes command names and arguments against a filesystem.

    ``commands`` is either an iterable of names or anything with a
    ``names()`` method, such as a CommandRegistry, which is queried on
    every completion.
    """

    def __init__(self, filesystem: Filesystem,
                 commands: Union[Iterable[str], object] = ()):
        self.filesystem = filesystem
        self._commands_source = commands
        self._compdef: Dict[str, str] = dict(DEFAULT_COMPDEF)
        self._completers: Dict[str, Completer] = {
            '_paths': self._paths,
            '_files': self._files,
            '_projects': self._projects,
        }

    def command_names(self) -> List[str]:
        source = self._commands_source
        if hasattr(source, 'names'):
            return list(source.names())
        return sorted(source)

    def compdef(self, completer: str, *commands: str):
        """Bind ``commands`` to the completer registered as ``completer``."""
        if completer not in self._completers:
            raise KeyError(f"unknown completer '{completer}'")
        for command in commands:
            self._compdef[command] = completer

    def register_completer(self, name: str, completer: Completer):
        self._completers[name] = completer

    def completer_for(self, command: str) -> Optional[str]:
        return self._compdef.get(command)

    def complete(self, buffer: str, cwd: str) -> CompletionResult:
        context = create_context(buffer, cwd)
        for stage in (self._complete_commands, self._complete_arguments):
            result = stage(context)
            if result:
                result.common_prefix = common_prefix(result.completions)
                logger.debug('Completed %r with %d candidates (%s)',
                             context.prefix, len(result.completions), result.type)
                return result
        return CompletionResult()

    def get_completions(self, buffer: str, cwd: str) -> List[str]:
        return self.complete(buffer, cwd).completions

    # Stages

    def _complete_commands(self, context: CompletionContext) -> CompletionResult:
        prefix = context.prefix
        if context.current != 0 or not prefix or looks_like_path(prefix):
            return CompletionResult()
        matches = [name for name in self.command_names() if name.startswith(prefix)]
        if matches == [prefix]:
            matches = [prefix + ' ']
        return CompletionResult(matches, 'command')

    def _complete_arguments(self, context: CompletionContext) -> CompletionResult:
        if context.current == 0:
            if not looks_like_path(context.prefix):
                return CompletionResult()
            name = '_files'
        else:
            name = self._compdef.get(context.command)
            if name is None:
                return CompletionResult()
        matches = self._completers[name](context.prefix, context.cwd)
        kind = 'path' if name in PATH_COMPLETERS else 'argument'
        return CompletionResult(matches, kind)

    # Completers

    def _paths(self, prefix: str, cwd: str) -> List[str]:
        """Directories, including symlinks that lead to directories."""
        return self._path_candidates(prefix, cwd, dirs_only=True)

    def _files(self, prefix: str, cwd: str) -> List[str]:
        return self._path_candidates(prefix, cwd, dirs_only=False)

    def _projects(self, prefix: str, cwd: str) -> List[str]:
        return [name for name in self.filesystem.project_names()
                if name.startswith(prefix) and name != prefix]

    def _path_candidates(self, prefix: str, cwd: str, dirs_only: bool) -> List[str]:
        fs = self.filesystem
        slash = prefix.rfind('/')
        if slash >= 0:
            base = prefix[:slash + 1]
            partial = prefix[slash + 1:]
            directory = fs.normalize_path(base, cwd)
        else:
            base = ''
            partial = prefix
            directory = cwd

        candidates = []
        for child in fs.list_directory(directory) or []:
            if child.is_hidden() and not partial.startswith('.'):
                continue
            is_dir = child.is_dir()
            if child.is_symlink():
                target = fs.resolve_path(fs.normalize_path(child.name, directory))
                is_dir = target is not None and target.is_dir()
            if dirs_only and not is_dir:
                continue
            candidates.append(base + child.name + ('/' if is_dir else ''))

        if not base and prefix:
            candidates.extend(s for s in SPECIAL_ENTRIES if s.startswith(prefix))

        seen = set()
        matches = []
        for candidate in candidates:
            if candidate.startswith(prefix) and candidate != prefix and candidate not in seen:
                seen.add(candidate)
                matches.append(candidate)
        return matches
