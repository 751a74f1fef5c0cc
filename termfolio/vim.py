#!/usr/bin/env python3
"""
A read-only, vim-like file viewer.

The viewer is a small state machine with a normal mode and a command-line
mode (entered with ``:``). It consumes key strings as a terminal would
deliver them (``'j'``, ``'\\x1b[B'``, ``'\\x04'`` ...) and exposes what
should be drawn as a VimView. Rendering to an actual screen is left to
the caller; ``render_lines`` produces a plain-text rendition.
"""

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

logger = logging.getLogger(__name__)

DEFAULT_ROWS = 22
DEFAULT_MESSAGE = 'Type :q to exit'

READONLY_WARNING = 'W10: Warning: Changing a readonly file'
WRITE_ERROR = "E45: 'readonly' option is set (add ! to override)"

EXIT_COMMANDS = ('q', 'q!', 'wq', 'wq!', 'x')
EDIT_KEYS = frozenset('iIaAoOsScCrRxXdDpP')

KEY_ESCAPE = '\x1b'
KEY_ENTER = ('\r', '\n')
KEY_BACKSPACE = ('\x7f', '\x08')
KEY_DOWN = ('j', '\x1b[B')
KEY_UP = ('k', '\x1b[A')
KEY_PAGE_DOWN = (' ', '\x1b[6~')
KEY_PAGE_UP = '\x1b[5~'
KEY_CTRL_D = '\x04'
KEY_CTRL_U = '\x15'


@dataclass
class VimState:
    content: str
    lines: List[str]
    file_path: str
    filename: str
    cursor_line: int = 0
    cursor_col: int = 0
    scroll_offset: int = 0
    command_mode: bool = False
    command_buffer: str = ''
    message: str = ''


@dataclass
class StatusLine:
    filename: str
    readonly: bool
    line_count: int
    byte_count: int
    position: str
    scroll_label: str

    @property
    def left(self) -> str:
        flag = ' [readonly]' if self.readonly else ''
        return f'"{self.filename}"{flag} {self.line_count}L, {self.byte_count}B'

    @property
    def right(self) -> str:
        return f'{self.position}   {self.scroll_label}'


@dataclass
class VimView:
    """Everything needed to draw one frame."""
    rows: List[Tuple[int, str]]
    filler_rows: int
    status: StatusLine
    command_line: str
    command_mode: bool = False
    is_error: bool = False


def _basename(path: str) -> str:
    parts = [p for p in path.split('/') if p]
    return parts[-1] if parts else '/'


def scroll_label(line_count: int, scroll_offset: int, rows: int) -> str:
    if line_count <= rows:
        return 'All'
    if scroll_offset == 0:
        return 'Top'
    if scroll_offset + rows >= line_count:
        return 'Bot'
    percent = int(scroll_offset / (line_count - rows) * 100 + 0.5)
    return f'{percent}%'


class VimViewer:
    """
    Read-only viewer over a single file.

    ``rows`` is the number of content rows in the viewport (the status and
    command lines are not included). ``on_exit`` is called once when the
    viewer closes itself via an exit command or an external sync.
    """

    def __init__(self, file_path: str, content: str, rows: int = DEFAULT_ROWS,
                 on_exit: Optional[Callable[[], None]] = None):
        self.rows = max(1, rows)
        self.on_exit = on_exit
        self.state: Optional[VimState] = None
        self._listeners: List[Callable[[VimView], None]] = []
        self.enter(file_path, content)

    # Lifecycle

    def enter(self, file_path: str, content: str):
        self.state = VimState(
            content=content,
            lines=content.split('\n'),
            file_path=file_path,
            filename=_basename(file_path),
        )
        logger.debug('Viewer opened %s', file_path)
        self._changed()

    def exit(self):
        if self.state is None:
            return
        logger.debug('Viewer closed %s', self.state.file_path)
        self.state = None
        if self.on_exit:
            self.on_exit()

    @property
    def active(self) -> bool:
        return self.state is not None

    def sync_from_external(self, editor_mode):
        """
        Follow the shell's editor mode.

        ``editor_mode`` is None when the shell closed the editor, otherwise
        an object with ``file_path`` and ``content``.
        """
        if editor_mode is None and self.state is not None:
            self.exit()
        elif editor_mode is not None and self.state is None:
            self.enter(editor_mode.file_path, editor_mode.content)

    def resize(self, rows: int):
        self.rows = max(1, rows)
        if self.state is None:
            return
        self.state.scroll_offset = min(self.state.scroll_offset, self._max_scroll())
        self._changed()

    def subscribe(self, listener: Callable[[VimView], None]) -> Callable[[], None]:
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    # Input

    def handle_key(self, key: str):
        """Feed one key (or escape sequence) to the viewer."""
        if self.state is None or not key:
            return
        if self.state.command_mode:
            self._handle_command_key(key)
        else:
            self._handle_normal_key(key)

    def _handle_command_key(self, key: str):
        state = self.state
        if key in KEY_ENTER:
            command = state.command_buffer.lower()
            if command in EXIT_COMMANDS:
                self.exit()
                return
            if command == 'w' or command.startswith('w '):
                state.message = WRITE_ERROR
            else:
                state.message = f'E492: Not an editor command: {state.command_buffer}'
            state.command_mode = False
            state.command_buffer = ''
        elif key == KEY_ESCAPE:
            state.command_mode = False
            state.command_buffer = ''
            state.message = ''
        elif key in KEY_BACKSPACE:
            if state.command_buffer:
                state.command_buffer = state.command_buffer[:-1]
            else:
                state.command_mode = False
        elif len(key) == 1 and 32 <= ord(key) < 127:
            state.command_buffer += key
        else:
            return
        self._changed()

    def _handle_normal_key(self, key: str):
        state = self.state
        rows = self.rows
        last_line = len(state.lines) - 1

        if key == ':':
            state.command_mode = True
            state.command_buffer = ''
            state.message = ''
        elif key == KEY_ESCAPE:
            state.message = ''
        elif key in KEY_DOWN:
            if state.cursor_line >= last_line:
                return
            state.cursor_line += 1
            if state.cursor_line >= state.scroll_offset + rows:
                state.scroll_offset = state.cursor_line - rows + 1
        elif key in KEY_UP:
            if state.cursor_line <= 0:
                return
            state.cursor_line -= 1
            if state.cursor_line < state.scroll_offset:
                state.scroll_offset = state.cursor_line
        elif key == 'G':
            state.cursor_line = last_line
            state.scroll_offset = self._max_scroll()
        elif key == 'g':
            state.cursor_line = 0
            state.scroll_offset = 0
        elif key in KEY_PAGE_DOWN:
            state.scroll_offset = min(state.scroll_offset + rows, self._max_scroll())
            state.cursor_line = min(state.scroll_offset + rows - 1, last_line)
        elif key == KEY_PAGE_UP:
            state.scroll_offset = max(0, state.scroll_offset - rows)
            state.cursor_line = state.scroll_offset
        elif key == KEY_CTRL_D:
            half = rows // 2
            state.scroll_offset = min(state.scroll_offset + half, self._max_scroll())
            state.cursor_line = min(state.cursor_line + half, last_line)
        elif key == KEY_CTRL_U:
            half = rows // 2
            state.scroll_offset = max(0, state.scroll_offset - half)
            state.cursor_line = max(0, state.cursor_line - half)
        elif key in EDIT_KEYS:
            state.message = READONLY_WARNING
        else:
            return
        self._changed()

    def _max_scroll(self) -> int:
        return max(0, len(self.state.lines) - self.rows)

    def _changed(self):
        if not self._listeners:
            return
        view = self.view()
        for listener in list(self._listeners):
            listener(view)

    # Output

    def view(self) -> Optional[VimView]:
        state = self.state
        if state is None:
            return None

        start = state.scroll_offset
        visible = state.lines[start:start + self.rows]
        rows = [(start + i + 1, line) for i, line in enumerate(visible)]

        status = StatusLine(
            filename=state.filename,
            readonly=True,
            line_count=len(state.lines),
            byte_count=len(state.content.encode('utf-8')),
            position=f'{state.cursor_line + 1},{state.cursor_col + 1}',
            scroll_label=scroll_label(len(state.lines), start, self.rows),
        )

        if state.command_mode:
            command_line = f':{state.command_buffer}'
        else:
            command_line = state.message or DEFAULT_MESSAGE

        return VimView(
            rows=rows,
            filler_rows=self.rows - len(rows),
            status=status,
            command_line=command_line,
            command_mode=state.command_mode,
            is_error=state.message.startswith(('E', 'W')) and not state.command_mode,
        )


def render_lines(view: VimView, cols: int = 80) -> List[str]:
    """Plain-text frame: numbered content rows, ``~`` filler, status, command line."""
    lines = []
    max_len = max(1, cols - 6)
    for number, text in view.rows:
        if len(text) > max_len:
            text = text[:max_len - 1] + '…'
        lines.append(f'{number:>4} {text}')
    lines.extend('   ~' for _ in range(view.filler_rows))

    left = ' ' + view.status.left
    right = view.status.right + ' '
    padding = max(1, cols - len(left) - len(right))
    lines.append(left + ' ' * padding + right)
    lines.append(view.command_line)
    return lines
