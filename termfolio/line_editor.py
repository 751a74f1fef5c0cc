#!/usr/bin/env python3
"""
Line editing for the interactive prompt (ZLE style).

LineBuffer is the single source of truth for the input line: text,
cursor position, autosuggestion hint and the prompt's own history.
LineEditor routes terminal key strings to it, owns the MenuComplete
widget, and hands submitted lines to the Shell.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

from .completion import create_context
from .menu_complete import MenuComplete, MenuDisplay

logger = logging.getLogger(__name__)

KEY_TAB = '\t'
KEY_ENTER = ('\r', '\n')
KEY_BACKSPACE = ('\x7f', '\x08')
KEY_DELETE = '\x1b[3~'
KEY_UP = '\x1b[A'
KEY_DOWN = '\x1b[B'
KEY_RIGHT = '\x1b[C'
KEY_LEFT = '\x1b[D'
KEY_HOME = ('\x1b[H', '\x1bOH')
KEY_END = ('\x1b[F', '\x1bOF')
KEY_WORD_LEFT = '\x1bb'
KEY_WORD_RIGHT = '\x1bf'
KEY_ALT_BACKSPACE = '\x1b\x7f'
KEY_CTRL_A = '\x01'
KEY_CTRL_C = '\x03'
KEY_CTRL_E = '\x05'
KEY_CTRL_K = '\x0b'
KEY_CTRL_L = '\x0c'
KEY_CTRL_U = '\x15'
KEY_CTRL_W = '\x17'


@dataclass
class LineState:
    buffer: str
    cursor_pos: int
    hint: str


class LineBuffer:
    """Editable input line with history navigation."""

    def __init__(self):
        self.buffer = ''
        self.cursor_pos = 0
        self.hint = ''
        self.history: List[str] = []
        self._history_index = -1
        self._saved_input = ''

    @property
    def state(self) -> LineState:
        return LineState(self.buffer, self.cursor_pos, self.hint)

    def at_end(self) -> bool:
        return self.cursor_pos == len(self.buffer)

    # Editing

    def insert(self, text: str):
        self.buffer = self.buffer[:self.cursor_pos] + text + self.buffer[self.cursor_pos:]
        self.cursor_pos += len(text)
        self.hint = ''

    def delete_backward(self) -> Optional[str]:
        if self.cursor_pos == 0:
            return None
        deleted = self.buffer[self.cursor_pos - 1]
        self.buffer = self.buffer[:self.cursor_pos - 1] + self.buffer[self.cursor_pos:]
        self.cursor_pos -= 1
        self.hint = ''
        return deleted

    def delete_forward(self) -> Optional[str]:
        if self.cursor_pos >= len(self.buffer):
            return None
        deleted = self.buffer[self.cursor_pos]
        self.buffer = self.buffer[:self.cursor_pos] + self.buffer[self.cursor_pos + 1:]
        self.hint = ''
        return deleted

    def delete_word(self) -> str:
        """Delete the word before the cursor, plus trailing spaces."""
        end = self.cursor_pos
        while end > 0 and self.buffer[end - 1] == ' ':
            end -= 1
        start = end
        while start > 0 and self.buffer[start - 1] != ' ':
            start -= 1
        deleted = self.buffer[start:self.cursor_pos]
        self.buffer = self.buffer[:start] + self.buffer[self.cursor_pos:]
        self.cursor_pos = start
        self.hint = ''
        return deleted

    def delete_to_end(self) -> str:
        deleted = self.buffer[self.cursor_pos:]
        self.buffer = self.buffer[:self.cursor_pos]
        self.hint = ''
        return deleted

    def delete_to_start(self) -> str:
        deleted = self.buffer[:self.cursor_pos]
        self.buffer = self.buffer[self.cursor_pos:]
        self.cursor_pos = 0
        self.hint = ''
        return deleted

    # Cursor movement; each returns the distance moved

    def move_left(self, n: int = 1) -> int:
        moved = min(n, self.cursor_pos)
        self.cursor_pos -= moved
        if moved:
            self.hint = ''
        return moved

    def move_right(self, n: int = 1) -> int:
        moved = min(n, len(self.buffer) - self.cursor_pos)
        self.cursor_pos += moved
        return moved

    def move_to_start(self) -> int:
        moved = self.cursor_pos
        self.cursor_pos = 0
        if moved:
            self.hint = ''
        return moved

    def move_to_end(self) -> int:
        moved = len(self.buffer) - self.cursor_pos
        self.cursor_pos = len(self.buffer)
        return moved

    def move_word_left(self) -> int:
        start = self.cursor_pos
        while self.cursor_pos > 0 and self.buffer[self.cursor_pos - 1] == ' ':
            self.cursor_pos -= 1
        while self.cursor_pos > 0 and self.buffer[self.cursor_pos - 1] != ' ':
            self.cursor_pos -= 1
        moved = start - self.cursor_pos
        if moved:
            self.hint = ''
        return moved

    def move_word_right(self) -> int:
        start = self.cursor_pos
        while self.cursor_pos < len(self.buffer) and self.buffer[self.cursor_pos] != ' ':
            self.cursor_pos += 1
        while self.cursor_pos < len(self.buffer) and self.buffer[self.cursor_pos] == ' ':
            self.cursor_pos += 1
        return self.cursor_pos - start

    # Whole line

    def set_line(self, text: str):
        self.buffer = text
        self.cursor_pos = len(text)
        self.hint = ''

    def clear(self) -> str:
        old = self.buffer
        self.set_line('')
        return old

    def submit(self) -> str:
        """Return the line and reset; non-blank lines go into history."""
        line = self.buffer
        if line.strip():
            self.history.append(line)
        self.cancel()
        return line

    def cancel(self):
        self.set_line('')
        self._history_index = -1
        self._saved_input = ''

    # History

    def history_up(self) -> Optional[str]:
        if not self.history:
            return None
        if self._history_index == -1:
            self._saved_input = self.buffer
        index = min(self._history_index + 1, len(self.history) - 1)
        if index == self._history_index:
            return None
        self._history_index = index
        entry = self.history[-1 - index]
        self.set_line(entry)
        return entry

    def history_down(self) -> Optional[str]:
        if self._history_index == -1:
            return None
        self._history_index -= 1
        if self._history_index == -1:
            self.set_line(self._saved_input)
            return self._saved_input
        entry = self.history[-1 - self._history_index]
        self.set_line(entry)
        return entry


@dataclass
class KeyOutcome:
    """What a renderer should do after a key was handled."""
    result: Optional[object] = None
    submitted: Optional[str] = None
    menu: Optional[MenuDisplay] = None
    menu_cleared: bool = False
    clear_screen: bool = False
    cancelled: bool = False
    changed: bool = False


class LineEditor:
    """
    Routes key strings to a LineBuffer and a Shell.

    Tab drives the menu completion widget; any other key resets it first.
    """

    def __init__(self, shell):
        self.shell = shell
        self.line = LineBuffer()
        self.menu = MenuComplete(shell.complete)

    @property
    def state(self) -> LineState:
        return self.line.state

    def handle_key(self, key: str) -> KeyOutcome:
        if key == KEY_TAB:
            return self._complete()

        outcome = KeyOutcome()
        if self.menu.is_active():
            outcome.menu_cleared = self.menu.is_menu_visible()
            self.menu.reset()

        line = self.line
        if key in KEY_ENTER:
            submitted = line.submit()
            outcome.submitted = submitted
            outcome.result = self.shell.execute(submitted)
            outcome.clear_screen = outcome.result.should_clear
            outcome.changed = True
            return outcome
        if key == KEY_CTRL_C:
            line.cancel()
            outcome.cancelled = True
        elif key == KEY_CTRL_L:
            outcome.clear_screen = True
        elif key in KEY_BACKSPACE:
            outcome.changed = line.delete_backward() is not None
        elif key == KEY_DELETE:
            outcome.changed = line.delete_forward() is not None
        elif key in (KEY_CTRL_W, KEY_ALT_BACKSPACE):
            outcome.changed = bool(line.delete_word())
        elif key == KEY_CTRL_K:
            outcome.changed = bool(line.delete_to_end())
        elif key == KEY_CTRL_U:
            outcome.changed = bool(line.delete_to_start())
        elif key in (KEY_CTRL_A,) + KEY_HOME:
            outcome.changed = bool(line.move_to_start())
        elif key in (KEY_CTRL_E,) + KEY_END:
            outcome.changed = bool(line.move_to_end())
        elif key == KEY_LEFT:
            outcome.changed = bool(line.move_left())
        elif key == KEY_RIGHT:
            outcome.changed = bool(line.move_right())
        elif key == KEY_WORD_LEFT:
            outcome.changed = bool(line.move_word_left())
        elif key == KEY_WORD_RIGHT:
            outcome.changed = bool(line.move_word_right())
        elif key == KEY_UP:
            outcome.changed = line.history_up() is not None
        elif key == KEY_DOWN:
            outcome.changed = line.history_down() is not None
        elif key and key[0] >= ' ' and not key.startswith('\x1b'):
            line.insert(key)
            outcome.changed = True
        else:
            return outcome

        if outcome.changed:
            self.update_hint()
        return outcome

    def update_hint(self):
        """Suggest the rest of the word when exactly one completion exists."""
        line = self.line
        if not line.at_end() or not line.buffer:
            line.hint = ''
            return
        completions = self.shell.get_completions(line.buffer)
        if len(completions) == 1:
            prefix = create_context(line.buffer, self.shell.cwd).prefix
            line.hint = completions[0][len(prefix):]
        else:
            line.hint = ''

    def _complete(self) -> KeyOutcome:
        result = self.menu.complete(self.line.buffer)
        if result is None:
            return KeyOutcome()
        self.line.set_line(result.new_buffer)
        if result.display is None:
            self.update_hint()
        logger.debug('Tab -> %r', result.new_buffer)
        return KeyOutcome(menu=result.display, changed=True)
