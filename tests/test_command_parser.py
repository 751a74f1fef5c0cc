#!/usr/bin/env python3
"""
Tests for the command parser: chain splitting, tokenizing and flags.
"""

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import unittest

from termfolio.command_parser import (
    CommandParser, ParsedCommand, last_segment, split_chain, tokenize,
)


class TestChainParsing(unittest.TestCase):
    """Test splitting command lines on && and ;."""

    def setUp(self):
        self.parser = CommandParser()

    def test_empty_input(self):
        """Blank lines produce an empty chain."""
        self.assertEqual(self.parser.parse('').segments, [])
        self.assertEqual(self.parser.parse('   ').segments, [])

    def test_single_command(self):
        chain = self.parser.parse('ls -la')
        self.assertEqual(chain.segments, [('ls -la', None)])

    def test_and_and_semicolon(self):
        """Operators are attached to the segment they follow."""
        chain = self.parser.parse('cd projects && ls ; pwd')
        self.assertEqual(chain.segments, [
            ('cd projects', '&&'),
            ('ls', ';'),
            ('pwd', None),
        ])

    def test_operators_inside_quotes_are_literal(self):
        chain = self.parser.parse('cat "a && b" ; ls \'x;y\'')
        self.assertEqual(chain.segments, [
            ('cat "a && b"', ';'),
            ("ls 'x;y'", None),
        ])

    def test_unclosed_quote_is_literal(self):
        self.assertEqual(split_chain("cat don't ; ls"), [
            ("cat don't ", ';'),
            (' ls', None),
        ])
        self.assertEqual(split_chain('echo "a && b'), [
            ('echo "a ', '&&'),
            (' b', None),
        ])

    def test_no_spaces_around_operators(self):
        chain = self.parser.parse('cd a&&ls;pwd')
        self.assertEqual([s for s, _ in chain.segments], ['cd a', 'ls', 'pwd'])

    def test_trailing_operator_is_dropped(self):
        chain = self.parser.parse('ls ;')
        self.assertEqual(chain.segments, [('ls', None)])

    def test_empty_segments_are_skipped(self):
        chain = self.parser.parse('ls ; ; pwd')
        self.assertEqual([s for s, _ in chain.segments], ['ls', 'pwd'])

    def test_chain_str(self):
        self.assertEqual(str(self.parser.parse('a&&b;c')), 'a && b ; c')

    def test_last_segment(self):
        self.assertEqual(last_segment('cd a && vim RE'), ' vim RE')
        self.assertEqual(last_segment('ls'), 'ls')
        self.assertEqual(split_chain('a;')[-1], ('', None))


class TestCommandParsing(unittest.TestCase):
    """Test tokenizing a single segment."""

    def setUp(self):
        self.parser = CommandParser()

    def test_simple_command(self):
        cmd = self.parser.parse_command('ls')
        self.assertEqual(cmd.name, 'ls')
        self.assertEqual(cmd.args, [])
        self.assertEqual(cmd.flags, {})

    def test_clustered_short_flags(self):
        """-la expands to one flag per letter."""
        cmd = self.parser.parse_command('ls -la /home')
        self.assertEqual(cmd.flags, {'l': True, 'a': True})
        self.assertEqual(cmd.args, ['/home'])
        self.assertEqual(cmd.raw_args, ['-la', '/home'])

    def test_long_flags(self):
        cmd = self.parser.parse_command('ls --all --sort=name dir')
        self.assertEqual(cmd.flags, {'all': True, 'sort': 'name'})
        self.assertEqual(cmd.args, ['dir'])

    def test_double_dash_ends_flags(self):
        cmd = self.parser.parse_command('cat -- -weird.txt')
        self.assertEqual(cmd.flags, {})
        self.assertEqual(cmd.args, ['-weird.txt'])

    def test_lone_dash_is_argument(self):
        cmd = self.parser.parse_command('cat -')
        self.assertEqual(cmd.args, ['-'])

    def test_quoted_arguments(self):
        cmd = self.parser.parse_command('cat "my file.txt"')
        self.assertEqual(cmd.args, ['my file.txt'])

    def test_unbalanced_quotes_fall_back_to_whitespace(self):
        self.assertEqual(tokenize('cat "oops'), ['cat', '"oops'])

    def test_empty_segment(self):
        self.assertEqual(self.parser.parse_command('  ').name, '')

    def test_parse_simple_takes_first_segment(self):
        cmd = self.parser.parse_simple('cd x && ls')
        self.assertEqual(cmd.name, 'cd')
        self.assertEqual(cmd.args, ['x'])

    def test_str(self):
        cmd = ParsedCommand(name='ls', args=['x'], flags={'l': True, 'sort': 'name'})
        self.assertEqual(str(cmd), 'ls -l --sort=name x')


if __name__ == '__main__':
    unittest.main()
