#!/usr/bin/env python3
"""
Zsh MENU_COMPLETE style Tab handling.

The widget has three states:

- idle: no candidates remembered
- primed: a common prefix was inserted, candidates are remembered but no
  menu is shown (index -1)
- menu: candidates are cycled on each Tab, replacing the inserted text

Any key other than Tab should call ``reset()``.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from .completion import CompletionResult, create_context

logger = logging.getLogger(__name__)


@dataclass
class MenuState:
    index: int = -1
    completions: List[str] = field(default_factory=list)
    original_input: str = ''
    original_prefix: str = ''


@dataclass
class MenuDisplay:
    """What a renderer needs to draw the candidate menu."""
    items: List[str]
    selected_index: int


@dataclass
class MenuCompleteResult:
    new_buffer: str
    suffix: str = ''
    display: Optional[MenuDisplay] = None
    completion_type: Optional[str] = None

    @property
    def show_menu(self) -> bool:
        return self.display is not None


class MenuComplete:
    """
    Cycles through completions of the current word.

    ``complete_fn`` maps a buffer to a CompletionResult; Shell.complete has
    the right shape.
    """

    def __init__(self, complete_fn: Callable[[str], CompletionResult]):
        self._complete_fn = complete_fn
        self.state: Optional[MenuState] = None
        self._last_buffer: Optional[str] = None
        self._type: Optional[str] = None

    def is_active(self) -> bool:
        return self.state is not None

    def is_menu_visible(self) -> bool:
        return self.state is not None and self.state.index >= 0

    def reset(self):
        self.state = None
        self._last_buffer = None
        self._type = None

    def complete(self, buffer: str) -> Optional[MenuCompleteResult]:
        """
        Handle one Tab press.

        Returns None when there is nothing to complete.
        """
        if self.state is not None and buffer == self._last_buffer:
            return self._cycle_next()
        self.reset()
        return self._first_complete(buffer)

    def _first_complete(self, buffer: str) -> Optional[MenuCompleteResult]:
        result = self._complete_fn(buffer)
        if not result.completions:
            return None

        prefix = create_context(buffer, '/').prefix
        completions = result.completions

        if len(completions) == 1:
            suffix = completions[0][len(prefix):]
            if not suffix:
                return None
            return MenuCompleteResult(buffer + suffix, suffix,
                                      completion_type=result.type)

        common = result.common_prefix
        common_suffix = common[len(prefix):] if common.startswith(prefix) else ''
        new_buffer = buffer + common_suffix
        self.state = MenuState(
            index=-1,
            completions=list(completions),
            original_input=new_buffer,
            original_prefix=prefix + common_suffix,
        )
        self._type = result.type

        if common_suffix:
            logger.debug('Inserted common prefix %r', common_suffix)
            self._last_buffer = new_buffer
            return MenuCompleteResult(new_buffer, common_suffix,
                                      completion_type=result.type)

        return self._cycle_next()

    def _cycle_next(self) -> MenuCompleteResult:
        state = self.state
        state.index = (state.index + 1) % len(state.completions)
        base = state.original_input[:len(state.original_input) - len(state.original_prefix)]
        candidate = state.completions[state.index]
        new_buffer = base + candidate
        self._last_buffer = new_buffer
        return MenuCompleteResult(
            new_buffer,
            candidate[len(state.original_prefix):],
            display=MenuDisplay(list(state.completions), state.index),
            completion_type=self._type,
        )
