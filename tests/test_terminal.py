#!/usr/bin/env python3
"""
Tests for the terminal session and the command line entry point.
"""

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import json
import unittest
from unittest.mock import patch

import pytest
from termfolio.terminal import (
    TabCompleter, TerminalConfig, TerminalSession, build_filesystem, main,
)


class TestTerminalSession(unittest.TestCase):
    """Test the session over the default tree."""

    def setUp(self):
        self.session = TerminalSession(TerminalConfig(enable_colors=False))

    def test_prompt_shows_home_as_tilde(self):
        self.assertEqual(self.session.get_prompt(), 'guest@termfolio.local:~$ ')
        self.session.run_command('cd dev')
        self.assertEqual(self.session.get_prompt(), 'guest@termfolio.local:/home/dev$ ')

    def test_colored_prompt(self):
        session = TerminalSession(TerminalConfig())
        self.assertIn('\033[32mguest@termfolio.local\033[0m', session.get_prompt())

    def test_run_command(self):
        self.assertEqual(self.session.run_command('pwd'), '/home/guest')

    def test_exit_returns_none(self):
        self.assertIsNone(self.session.execute_command('exit'))
        self.assertIsNone(self.session.execute_command('quit'))

    def test_vim_renders_a_frame(self):
        """Outside the REPL, vim prints one screen and closes."""
        output = self.session.run_command('vim /etc/hostname')
        self.assertIn('   1 termfolio.local', output)
        self.assertIn('"hostname" [readonly]', output)
        self.assertFalse(self.session.shell.is_editor_mode)

    def test_run_script(self):
        outputs = self.session.run_script([
            '# comment',
            'cd /etc',
            'pwd',
            '',
            'exit',
            'pwd',
        ])
        self.assertEqual(outputs, ['', '/etc'])

    def test_initial_directory(self):
        session = TerminalSession(TerminalConfig(enable_colors=False, initial_dir='/etc'))
        self.assertEqual(session.run_command('pwd'), '/etc')

    def test_initial_directory_must_exist(self):
        with self.assertRaises(FileNotFoundError):
            TerminalSession(TerminalConfig(initial_dir='/nowhere'))
        with self.assertRaises(NotADirectoryError):
            TerminalSession(TerminalConfig(initial_dir='/etc/motd'))

    def test_initial_directory_through_symlink(self):
        session = TerminalSession(TerminalConfig(enable_colors=False,
                                                 initial_dir='/home/guest/dev'))
        self.assertEqual(session.run_command('pwd'), '/home/guest/dev')

    def test_interactive_loop(self):
        inputs = iter(['cd /usr', 'pwd', 'exit'])
        with patch('builtins.input', lambda prompt='': next(inputs)), \
                patch('builtins.print') as mock_print:
            self.session.run_interactive()
        printed = [call.args[0] for call in mock_print.call_args_list if call.args]
        self.assertIn('/usr', printed)
        self.assertEqual(printed[-1], 'Goodbye!')

    def test_interactive_viewer(self):
        inputs = iter(['vim /etc/motd', 'j', ':q', 'pwd', 'exit'])
        with patch('builtins.input', lambda prompt='': next(inputs)), \
                patch('builtins.print'):
            self.session.run_interactive()
        self.assertFalse(self.session.shell.is_editor_mode)
        self.assertEqual(self.session.shell.history[-1], 'pwd')


class TestTabCompleter(unittest.TestCase):

    def test_matches_drop_trailing_space(self):
        session = TerminalSession(TerminalConfig(enable_colors=False))
        completer = TabCompleter(session.shell)
        self.assertEqual(completer.matches('whoam'), ['whoami'])
        self.assertEqual(completer.matches('whoami'), ['whoami'])
        self.assertEqual(completer.matches('cd /e'), ['/etc/'])


class TestConfigFiles:
    """Seed and records files feed the filesystem."""

    def test_build_from_files(self, tmp_path):
        seed = tmp_path / 'seed.json'
        seed.write_text(json.dumps({'root': {
            'home': {'type': 'directory', 'children': {
                'visitor': {'type': 'directory', 'children': {
                    'work': {'type': 'directory', 'dynamic': 'projects'},
                }},
            }},
        }}))
        records = tmp_path / 'projects.json'
        records.write_text(json.dumps({'projects': {'demo': {'readme': '# demo'}}}))

        config = TerminalConfig(home_dir='/home/visitor', seed_file=str(seed),
                                records_file=str(records))
        fs = build_filesystem(config)
        assert fs.home == '/home/visitor'
        assert [n.name for n in fs.list_directory('/home/visitor/work')] == ['demo.md']


class TestMain:
    """Test the argparse entry point."""

    def test_command_option(self, capsys):
        main(['--no-color', '-c', 'cd /etc && ls'])
        out = capsys.readouterr().out
        assert 'hostname' in out
        assert 'motd' in out

    def test_bad_seed_file(self, tmp_path, capsys):
        bad = tmp_path / 'bad.json'
        bad.write_text('[1, 2')
        with pytest.raises(SystemExit):
            main(['--seed', str(bad), '-c', 'pwd'])
        assert 'invalid JSON' in capsys.readouterr().err

    def test_missing_directory_option(self, capsys):
        with pytest.raises(SystemExit):
            main(['-d', '/nowhere', '-c', 'pwd'])
        assert '/nowhere: No such file or directory' in capsys.readouterr().err


if __name__ == '__main__':
    unittest.main()
