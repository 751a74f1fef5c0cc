#!/usr/bin/env python3
"""
Command parser for the termfolio shell.

Translates command lines into structured representations that the shell
dispatches to registered commands.

Design Principles:
- Single responsibility: parse commands, don't execute them
- Composable: chain splitting and tokenizing are independent steps
- Testable: pure functions with predictable outputs
"""

import shlex
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple, Union

CHAIN_OPERATORS = ('&&', ';')


@dataclass
class ParsedCommand:
    """
    A single command with its positional arguments and flags.

    Flags map the flag name to ``True`` or, for ``--key=value``, to the
    value string.
    """
    name: str
    args: List[str] = field(default_factory=list)
    flags: Dict[str, Union[bool, str]] = field(default_factory=dict)
    raw_args: List[str] = field(default_factory=list)

    def __str__(self) -> str:
        parts = [self.name]
        for key, value in self.flags.items():
            if value is True:
                parts.append(f"-{key}" if len(key) == 1 else f"--{key}")
            else:
                parts.append(f"--{key}={value}")
        parts.extend(self.args)
        return ' '.join(parts)


@dataclass
class CommandChain:
    """
    Segments of a command line joined by ``&&`` or ``;``.

    Each entry is ``(segment_text, operator)``; the operator is the one
    following the segment, None for the last segment.
    """
    segments: List[Tuple[str, Optional[str]]] = field(default_factory=list)

    def __str__(self) -> str:
        parts = []
        for segment, op in self.segments:
            parts.append(segment)
            if op:
                parts.append(op)
        return ' '.join(parts)

    def __len__(self) -> int:
        return len(self.segments)


class CommandParser:
    """
    Parser for the shell's command syntax.

    This parser handles:
    - Commands with arguments
    - Flags (short: -a, -abc; long: --flag, --flag=value; -- ends flags)
    - Command sequences (&& and ;) outside quotes
    - Quoting via shlex, falling back to whitespace on unbalanced quotes
    """

    def parse(self, command_line: str) -> CommandChain:
        """Split a command line into a chain of segments."""
        if not command_line or not command_line.strip():
            return CommandChain()

        segments = []
        for text, op in split_chain(command_line):
            text = text.strip()
            if text:
                segments.append((text, op))
        # A trailing operator has nothing to join.
        if segments and segments[-1][1] is not None:
            text, _ = segments[-1]
            segments[-1] = (text, None)
        return CommandChain(segments=segments)

    def parse_command(self, command_str: str) -> ParsedCommand:
        """Tokenize one segment into a ParsedCommand."""
        tokens = tokenize(command_str)
        if not tokens:
            return ParsedCommand(name='')

        cmd_name = tokens[0]
        raw_args = tokens[1:]
        flags, args = self._parse_flags(raw_args)
        return ParsedCommand(name=cmd_name, args=args, flags=flags, raw_args=raw_args)

    def parse_simple(self, command_str: str) -> ParsedCommand:
        """Parse a single command, ignoring any chain operators."""
        chain = self.parse(command_str)
        if not chain.segments:
            return ParsedCommand(name='')
        return self.parse_command(chain.segments[0][0])

    def _parse_flags(self, raw_args: List[str]) -> Tuple[Dict[str, Union[bool, str]], List[str]]:
        flags: Dict[str, Union[bool, str]] = {}
        args: List[str] = []
        end_of_flags = False

        for arg in raw_args:
            if end_of_flags:
                args.append(arg)
            elif arg == '--':
                end_of_flags = True
            elif arg.startswith('--'):
                key, sep, value = arg[2:].partition('=')
                flags[key] = value if sep else True
            elif arg.startswith('-') and len(arg) > 1:
                for char in arg[1:]:
                    flags[char] = True
            else:
                args.append(arg)

        return flags, args


def tokenize(text: str) -> List[str]:
    """Split a segment into words, honoring quotes when they balance."""
    try:
        return shlex.split(text)
    except ValueError:
        # Unclosed quotes
        return text.split()


def split_chain(text: str) -> List[Tuple[str, Optional[str]]]:
    """Split text on ``&&`` and ``;`` outside of quotes.

    A quote left open at the end of the line is an ordinary character,
    so the line is scanned again with quoting turned off.
    """
    parts, unclosed = _scan_chain(text, quoting=True)
    if unclosed:
        parts, _ = _scan_chain(text, quoting=False)
    return parts


def _scan_chain(text: str, quoting: bool) -> Tuple[List[Tuple[str, Optional[str]]], bool]:
    parts: List[Tuple[str, Optional[str]]] = []
    current: List[str] = []
    in_single_quote = False
    in_double_quote = False
    escaped = False
    i = 0

    while i < len(text):
        char = text[i]
        if escaped:
            current.append(char)
            escaped = False
        elif quoting and char == '\\' and not in_single_quote:
            escaped = True
            current.append(char)
        elif quoting and char == "'" and not in_double_quote:
            in_single_quote = not in_single_quote
            current.append(char)
        elif quoting and char == '"' and not in_single_quote:
            in_double_quote = not in_double_quote
            current.append(char)
        elif not in_single_quote and not in_double_quote and text.startswith('&&', i):
            parts.append((''.join(current), '&&'))
            current = []
            i += 1
        elif char == ';' and not in_single_quote and not in_double_quote:
            parts.append((''.join(current), ';'))
            current = []
        else:
            current.append(char)
        i += 1

    parts.append((''.join(current), None))
    return parts, in_single_quote or in_double_quote


def last_segment(text: str) -> str:
    """Text after the final chain operator, unstripped."""
    return split_chain(text)[-1][0]
