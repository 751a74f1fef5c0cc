#!/usr/bin/env python3
"""
Tests for the Shell orchestrator: chain execution, state folding,
AUTO_CD, subscriptions and editor mode.
"""

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import dataclasses
import pytest
from termfolio.commands import Command, Success
from termfolio.filesystem import Filesystem
from termfolio.shell import ExecuteResult, Shell, ShellState, create_shell


TREE = {
    'home': {'type': 'directory', 'children': {
        'guest': {'type': 'directory', 'children': {
            'projects': {'type': 'directory', 'children': {
                'a.md': {'type': 'file', 'content': '# a'},
                'b.md': {'type': 'file', 'content': '# b'},
            }},
            'readme.txt': {'type': 'file', 'content': 'line one\nline two'},
            'link': {'type': 'symlink', 'target': '/srv/data/current'},
        }},
    }},
    'srv': {'type': 'directory', 'children': {
        'data': {'type': 'directory', 'children': {
            'current': {'type': 'directory', 'children': {
                'file.txt': {'type': 'file', 'content': 'x'},
            }},
            'old': {'type': 'directory'},
        }},
    }},
}


@pytest.fixture
def shell():
    return Shell(Filesystem.from_description(TREE))


class TestExecute:
    """Test command line execution."""

    def test_end_to_end_cd_and_ls(self, shell):
        result = shell.execute('cd projects && ls')
        assert shell.cwd == '/home/guest/projects'
        assert not result.error
        assert 'a.md' in result.output
        assert 'b.md' in result.output

    def test_and_stops_after_error(self, shell):
        result = shell.execute('cd nonexistent && ls')
        assert result.error
        assert result.output == 'cd: nonexistent: No such file or directory'
        assert shell.cwd == '/home/guest'

    def test_semicolon_always_continues(self, shell):
        result = shell.execute('cd nonexistent ; ls')
        assert 'cd: nonexistent: No such file or directory' in result.output
        assert 'projects/' in result.output
        assert not result.error

    def test_semicolon_after_skipped_segment(self, shell):
        result = shell.execute('cd nowhere && ls ; pwd')
        assert result.output.split('\n') == [
            'cd: nowhere: No such file or directory',
            '/home/guest',
        ]

    def test_and_chain_stays_skipped(self, shell):
        result = shell.execute('cd nowhere && pwd && pwd')
        assert result.output == 'cd: nowhere: No such file or directory'
        assert result.error

    def test_semicolon_after_lone_apostrophe(self, shell):
        result = shell.execute("cat don't ; ls")
        assert result.output.split('\n')[0] == "cat: don't: No such file or directory"
        assert 'projects/' in result.output
        assert not result.error

    def test_and_after_lone_apostrophe(self):
        tree = {'home': {'type': 'directory', 'children': {
            'guest': {'type': 'directory', 'children': {
                "it's.md": {'type': 'file', 'content': 'quoted'},
                'projects': {'type': 'directory'},
            }},
        }}}
        shell = Shell(Filesystem.from_description(tree))
        result = shell.execute("cat it's.md && cd projects")
        assert result.output == 'quoted'
        assert shell.cwd == '/home/guest/projects'

    def test_state_folds_between_segments(self, shell):
        result = shell.execute('cd projects ; pwd')
        assert result.output == '/home/guest/projects'

    def test_unknown_command(self, shell):
        result = shell.execute('frobnicate')
        assert result.error
        assert result.output.startswith('command not found: frobnicate.')

    def test_url_path_is_last_hint(self, shell):
        result = shell.execute('cd / && cd ~')
        assert result.url_path == '/'

    def test_clear_sets_should_clear(self, shell):
        assert shell.execute('pwd && clear').should_clear

    def test_handler_returning_garbage_is_a_type_error(self, shell):
        shell.commands.register(Command('bad', 'broken', 'bad', lambda a, f, s: 'oops'))
        with pytest.raises(TypeError):
            shell.execute('bad')


class TestHistory:
    """Blank input is ignored, everything else is recorded."""

    def test_three_commands_three_entries(self, shell):
        shell.execute('pwd')
        shell.execute('  ls  ')
        shell.execute('cd nowhere')
        assert shell.history == ('pwd', 'ls', 'cd nowhere')

    def test_blank_input(self, shell):
        assert shell.execute('   ') == ExecuteResult()
        assert shell.execute('') == ExecuteResult()
        assert shell.history == ()


class TestSymlinkNavigation:
    """cd through a symlink lands on the target's canonical path."""

    def test_cd_dotdot_after_symlink(self, shell):
        shell.execute('cd link')
        assert shell.cwd == '/srv/data/current'
        shell.execute('cd ..')
        assert shell.cwd == '/srv/data'

    def test_view_path_follows_cd(self, shell):
        shell.execute('cd link')
        assert shell.view_path == '/srv/data/current'


class TestAutoCd:
    """A bare path-like token navigates."""

    def test_directory_token(self, shell):
        result = shell.execute('./projects')
        assert not result.error
        assert shell.cwd == '/home/guest/projects'

    def test_exact_tokens(self, shell):
        shell.execute('/srv')
        shell.execute('..')
        assert shell.cwd == '/'
        shell.execute('~')
        assert shell.cwd == '/home/guest'

    def test_missing_path_is_navigation_error(self, shell):
        result = shell.execute('./missing')
        assert result.error
        assert result.output == './missing: no such file or directory'

    def test_file_path_is_an_error(self, shell):
        result = shell.execute('./readme.txt')
        assert result.error
        assert result.output == './readme.txt: not a directory'
        assert shell.cwd == '/home/guest'

    def test_plain_word_is_not_a_path(self, shell):
        result = shell.execute('projects')
        assert result.output.startswith('command not found')


class TestSubscriptions:
    """Listeners get one snapshot per execute and per exit_editor."""

    def test_notified_once_per_execute(self, shell):
        seen = []
        shell.subscribe(seen.append)
        shell.execute('cd projects && ls')
        shell.execute('pwd')
        assert len(seen) == 2
        assert seen[0].cwd == '/home/guest/projects'
        assert isinstance(seen[0], ShellState)

    def test_blank_input_does_not_notify(self, shell):
        seen = []
        shell.subscribe(seen.append)
        shell.execute('  ')
        assert seen == []

    def test_multiple_subscribers_and_unsubscribe(self, shell):
        first, second = [], []
        unsubscribe = shell.subscribe(first.append)
        shell.subscribe(second.append)
        shell.execute('pwd')
        unsubscribe()
        shell.execute('pwd')
        assert len(first) == 1
        assert len(second) == 2

    def test_unsubscribe_method(self, shell):
        seen = []
        shell.subscribe(seen.append)
        shell.unsubscribe(seen.append)
        shell.execute('pwd')
        assert seen == []

    def test_snapshot_is_immutable(self, shell):
        shell.execute('pwd')
        state = shell.state
        with pytest.raises(dataclasses.FrozenInstanceError):
            state.cwd = '/'
        shell.execute('cd /')
        assert state.cwd == '/home/guest'
        assert state.history == ('pwd',)


class TestEditorMode:
    """vim enters editor mode; :q and exit_editor leave it."""

    def test_vim_sets_editor_mode(self, shell):
        result = shell.execute('vim readme.txt')
        assert not result.error
        assert shell.is_editor_mode
        assert shell.editor_mode.file_path == '/home/guest/readme.txt'
        assert shell.editor_mode.content == 'line one\nline two'

    def test_quit_inside_editor(self, shell):
        shell.execute('vim readme.txt')
        result = shell.execute(':q')
        assert not result.error
        assert not shell.is_editor_mode

    def test_quit_outside_editor(self, shell):
        result = shell.execute(':q')
        assert result.error
        assert result.output == 'E492: Not an editor command: q'

    def test_exit_editor_notifies(self, shell):
        shell.execute('vim readme.txt')
        seen = []
        shell.subscribe(seen.append)
        shell.exit_editor()
        assert len(seen) == 1
        assert seen[0].editor_mode is None


class TestCompletionForwarding:
    """complete() uses the shell's cwd."""

    def test_complete_uses_cwd(self, shell):
        assert shell.get_completions('cat rea') == ['readme.txt']
        shell.execute('cd projects')
        assert shell.get_completions('cat ') == ['a.md', 'b.md']


class TestFactory:
    def test_create_shell_default_tree(self):
        shell = create_shell()
        assert shell.cwd == '/home/guest'
        result = shell.execute('cd dev/projects && ls')
        assert not result.error
        assert 'termfolio.md' in result.output
        assert result.url_path == '/projects'
