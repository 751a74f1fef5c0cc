#!/usr/bin/env python3
"""
Terminal front end for termfolio.

This module provides a text REPL over a Shell: it formats the prompt,
runs command lines, drives the read-only viewer when a command opens
one, and wires readline tab completion to the completion engine.

Design Principles:
- The Shell owns all session state; the terminal only renders it
- Same code path for interactive use, ``-c`` commands and scripts
"""

import logging
import sys
from dataclasses import dataclass
from typing import List, Optional

from .filesystem import DynamicRecords, Filesystem, SeedError
from .seed import DEFAULT_FILESYSTEM, GUEST_HOME, HOSTNAME, default_records, \
    load_description, load_records
from .shell import ExecuteResult, Shell
from .vim import DEFAULT_ROWS, VimViewer, render_lines

logger = logging.getLogger(__name__)

CLEAR_SCREEN = '\033[2J\033[H'
EXIT_COMMANDS = ('exit', 'quit', 'logout')


@dataclass
class TerminalConfig:
    """Configuration for terminal session."""
    user: str = 'guest'
    hostname: str = HOSTNAME
    home_dir: str = GUEST_HOME
    initial_dir: Optional[str] = None
    prompt_format: str = '{user}@{hostname}:{cwd}$ '
    enable_colors: bool = True
    history_size: int = 1000
    viewport_rows: int = DEFAULT_ROWS
    columns: int = 80
    seed_file: Optional[str] = None
    records_file: Optional[str] = None


def build_filesystem(config: TerminalConfig) -> Filesystem:
    """Filesystem described by the config's seed and records files."""
    description = load_description(config.seed_file) if config.seed_file else DEFAULT_FILESYSTEM
    records: DynamicRecords = (load_records(config.records_file)
                               if config.records_file else default_records())
    return Filesystem.from_description(description, records, home=config.home_dir)


def check_directory(filesystem: Filesystem, path: Optional[str]):
    """Raise unless ``path`` (when given) names a directory."""
    if not path:
        return
    node = filesystem.resolve_path(filesystem.normalize_path(path))
    if node is None:
        raise FileNotFoundError(f'{path}: No such file or directory')
    if not node.is_dir():
        raise NotADirectoryError(f'{path}: Not a directory')


class TabCompleter:
    """
    Readline completion function backed by the shell's completion engine.

    Readline completes the word between delimiters; the engine sees the
    whole line up to the cursor and returns full replacement words.
    """

    DELIMS = ' \t\n;&'

    def __init__(self, shell: Shell):
        self.shell = shell
        self._matches: List[str] = []

    def matches(self, line: str) -> List[str]:
        # Readline appends its own space after a unique match.
        return [c.rstrip(' ') for c in self.shell.get_completions(line)]

    def complete(self, text: str, state: int) -> Optional[str]:
        """Readline completion function."""
        if state == 0:
            import readline
            line = readline.get_line_buffer()[:readline.get_endidx()]
            self._matches = self.matches(line)
        try:
            return self._matches[state]
        except IndexError:
            return None

    def install(self):
        import readline
        readline.set_completer(self.complete)
        readline.set_completer_delims(self.DELIMS)
        readline.parse_and_bind('tab: complete')


class TerminalSession:
    """
    Main terminal session manager.

    Provides the REPL loop, prompt display and viewer handling around a
    Shell instance.
    """

    def __init__(self, config: Optional[TerminalConfig] = None,
                 shell: Optional[Shell] = None):
        self.config = config or TerminalConfig()
        if shell is None:
            filesystem = build_filesystem(self.config)
            check_directory(filesystem, self.config.initial_dir)
            shell = Shell(filesystem, cwd=self.config.initial_dir)
        self.shell = shell
        self.running = False

    def get_prompt(self) -> str:
        """Generate the command prompt."""
        cwd = self.shell.cwd
        home = self.shell.home
        if cwd == home or cwd.startswith(home + '/'):
            display_cwd = '~' + cwd[len(home):]
        else:
            display_cwd = cwd

        if self.config.enable_colors:
            user_host = f'\033[32m{self.config.user}@{self.config.hostname}\033[0m'
            return f'{user_host}:\033[34m{display_cwd}\033[0m$ '

        return self.config.prompt_format.format(
            user=self.config.user,
            hostname=self.config.hostname,
            cwd=display_cwd,
        )

    def execute_command(self, command_line: str) -> Optional[str]:
        """
        Execute a command line and return the output.

        Returns None for exit commands. When the command opens the viewer
        outside an interactive session, the first screen of the file is
        returned and the viewer is closed again.
        """
        if command_line.strip() in EXIT_COMMANDS:
            return None

        result = self.shell.execute(command_line)
        output = self._format(result)

        if self.shell.is_editor_mode and not self.running:
            viewer = self._open_viewer()
            frame = '\n'.join(render_lines(viewer.view(), self.config.columns))
            self.shell.exit_editor()
            output = f'{output}\n{frame}' if output else frame
        return output

    def _format(self, result: ExecuteResult) -> str:
        output = result.output
        if result.should_clear and self.config.enable_colors:
            output = CLEAR_SCREEN + output
        return output

    def _open_viewer(self) -> VimViewer:
        mode = self.shell.editor_mode
        return VimViewer(mode.file_path, mode.content,
                         rows=self.config.viewport_rows,
                         on_exit=self._viewer_closed)

    def _viewer_closed(self):
        if self.shell.is_editor_mode:
            self.shell.exit_editor()

    def run_viewer(self):
        """
        Drive the viewer from line-based input.

        Each entered line is fed to the viewer key by key; an empty line
        scrolls one line down and ``:`` lines are submitted with Enter.
        """
        viewer = self._open_viewer()
        while viewer.active:
            self._draw(viewer)
            try:
                line = input()
            except EOFError:
                viewer.exit()
                break
            if not line:
                viewer.handle_key('j')
                continue
            for key in line:
                viewer.handle_key(key)
            if line.startswith(':') and viewer.active:
                viewer.handle_key('\r')

    def _draw(self, viewer: VimViewer):
        if self.config.enable_colors:
            sys.stdout.write(CLEAR_SCREEN)
        print('\n'.join(render_lines(viewer.view(), self.config.columns)))

    def run_interactive(self):
        """Run the interactive REPL loop."""
        self.running = True
        self._setup_readline()

        motd = self.shell.get_file_content('/etc/motd')
        print(motd.rstrip() if motd else "Type 'help' for available commands.")
        print()

        while self.running:
            try:
                command_line = input(self.get_prompt())
                output = self.execute_command(command_line)
                if output is None:
                    break
                if output:
                    print(output)
                if self.shell.is_editor_mode:
                    self.run_viewer()
            except KeyboardInterrupt:
                print("^C")
                continue
            except EOFError:
                print()
                break

        self.running = False
        print("Goodbye!")

    def _setup_readline(self):
        try:
            import readline
        except ImportError:
            logger.debug('readline unavailable, tab completion disabled')
            return
        readline.set_history_length(self.config.history_size)
        TabCompleter(self.shell).install()

    def run_command(self, command_line: str) -> str:
        """Run a single command and return output."""
        output = self.execute_command(command_line)
        return output if output is not None else ''

    def run_script(self, script_lines: List[str]) -> List[str]:
        """Run a script (list of command lines) and return outputs."""
        outputs = []
        for line in script_lines:
            line = line.strip()
            if not line or line.startswith('#'):
                continue

            output = self.execute_command(line)
            if output is None:
                break
            outputs.append(output)

        return outputs


def main(argv: Optional[List[str]] = None):
    """Main entry point for the termfolio terminal."""
    import argparse

    parser = argparse.ArgumentParser(description='termfolio: a portfolio you browse like a shell')
    parser.add_argument('-c', '--command', help='Execute command and exit')
    parser.add_argument('-d', '--directory', help='Set initial directory')
    parser.add_argument('--seed', help='JSON filesystem description')
    parser.add_argument('--records', help='JSON project/profile records')
    parser.add_argument('--rows', type=int, default=DEFAULT_ROWS,
                        help='Viewer content rows')
    parser.add_argument('--no-color', action='store_true', help='Disable ANSI colors')
    parser.add_argument('-v', '--verbose', action='store_true', help='Debug logging')
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(asctime)s %(name)s %(levelname)s: %(message)s',
    )

    config = TerminalConfig(
        initial_dir=args.directory,
        enable_colors=not args.no_color,
        viewport_rows=args.rows,
        seed_file=args.seed,
        records_file=args.records,
    )
    try:
        session = TerminalSession(config=config)
    except (SeedError, OSError) as e:
        parser.error(str(e))

    if args.command:
        output = session.run_command(args.command)
        if output:
            print(output)
    else:
        session.run_interactive()


if __name__ == '__main__':
    main()
