#!/usr/bin/env python3
"""
Default seed data and loaders for the virtual filesystem.

The description format mirrors the JSON accepted by ``load_description``::

    {"version": 1,
     "root": {"home": {"type": "directory", "children": {...}}}}

Nodes carry a ``type`` and optionally ``icon``, ``content``, ``target``,
``children`` and a ``dynamic`` marker (``projects`` or ``profile``).
"""

import json
import logging
from typing import Any, Dict

from .filesystem import DynamicRecords, Profile, Project, SeedError

logger = logging.getLogger(__name__)

OWNER = 'dev'
HOSTNAME = 'termfolio.local'
GUEST_HOME = '/home/guest'
OWNER_HOME = f'/home/{OWNER}'

DEFAULT_FILESYSTEM: Dict[str, Any] = {
    'version': 1,
    'root': {
        'home': {
            'type': 'directory',
            'icon': 'folder',
            'children': {
                'guest': {
                    'type': 'directory',
                    'icon': 'folder',
                    'children': {
                        '.bashrc': {
                            'type': 'file',
                            'icon': 'file',
                            'content': '# Guest user bashrc\n'
                                       f'export PS1="guest@{HOSTNAME}:~$ "\n',
                        },
                        OWNER: {
                            'type': 'symlink',
                            'icon': 'folder',
                            'target': OWNER_HOME,
                        },
                    },
                },
                OWNER: {
                    'type': 'directory',
                    'icon': 'folder',
                    'children': {
                        'projects': {
                            'type': 'directory',
                            'icon': 'folder',
                            'dynamic': 'projects',
                        },
                        'about.md': {
                            'type': 'file',
                            'icon': 'user',
                            'dynamic': 'profile',
                        },
                    },
                },
            },
        },
        'usr': {
            'type': 'directory',
            'icon': 'folder',
            'children': {
                'bin': {
                    'type': 'directory',
                    'icon': 'folder',
                    'children': {
                        name: {'type': 'executable'}
                        for name in ('help', 'ls', 'cd', 'cat', 'pwd',
                                     'clear', 'history', 'open', 'whoami',
                                     'vim')
                    },
                },
            },
        },
        'etc': {
            'type': 'directory',
            'icon': 'folder',
            'children': {
                'motd': {
                    'type': 'file',
                    'icon': 'text',
                    'content': (
                        '\n'
                        'Welcome to the termfolio server\n'
                        '===============================\n'
                        '\n'
                        'You are logged in as: guest (read-only access)\n'
                        "Type 'help' for available commands.\n"
                    ),
                },
                'hostname': {
                    'type': 'file',
                    'icon': 'file',
                    'content': HOSTNAME,
                },
            },
        },
    },
}

DEFAULT_PROFILE: Dict[str, Any] = {
    'name': 'Dev',
    'title': 'Software Engineer',
    'bio': 'Building small tools that make terminals friendlier.',
    'location': 'Earth',
    'email': 'dev@termfolio.local',
    'github': 'https://github.com/dev',
    'linkedin': 'https://linkedin.com/in/dev',
    'skills': ['Python', 'TypeScript', 'PostgreSQL', 'Docker'],
}

DEFAULT_PROJECTS: Dict[str, Dict[str, Any]] = {
    'termfolio': {
        'description': 'A portfolio that behaves like a shell',
        'readme': '# termfolio\n\nBrowse a portfolio with cd, ls and vim.\n',
        'stars': 42,
        'forks': 3,
        'language': 'Python',
        'url': 'https://github.com/dev/termfolio',
        'homepage': None,
        'updated_at': '2026-01-01T00:00:00Z',
        'topics': ['cli', 'portfolio'],
    },
    'dotfiles': {
        'description': 'Shell and editor configuration',
        'readme': '# dotfiles\n\nzsh, vim and tmux settings.\n',
        'stars': 7,
        'forks': 1,
        'language': 'Shell',
        'url': 'https://github.com/dev/dotfiles',
        'updated_at': '2025-11-20T00:00:00Z',
        'topics': ['zsh', 'vim'],
    },
    'pixel-garden': {
        'description': 'Procedural pixel-art plants',
        'readme': '# pixel-garden\n\nGrow tiny plants from L-systems.\n',
        'stars': 18,
        'forks': 2,
        'language': 'TypeScript',
        'url': 'https://github.com/dev/pixel-garden',
        'homepage': 'https://dev.github.io/pixel-garden',
        'updated_at': '2025-08-02T00:00:00Z',
        'topics': ['generative-art'],
    },
}


def default_records() -> DynamicRecords:
    """Fresh records built from the bundled sample data."""
    return DynamicRecords(
        projects=[Project.from_dict(data, name=name)
                  for name, data in DEFAULT_PROJECTS.items()],
        profile=Profile.from_dict(DEFAULT_PROFILE),
    )


def _load_json(path: str) -> Any:
    try:
        with open(path, 'r', encoding='utf-8') as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        raise SeedError(f'{path}: invalid JSON ({e})') from e


def load_description(path: str) -> Dict[str, Any]:
    """Read a filesystem description from a JSON file."""
    data = _load_json(path)
    if not isinstance(data, dict):
        raise SeedError(f'{path}: description must be a JSON object')
    logger.debug('Loaded filesystem description from %s', path)
    return data


def load_records(path: str) -> DynamicRecords:
    """
    Read project and profile records from a JSON file.

    The file holds ``{"generated_at": ..., "projects": {name: {...}}}`` with
    an optional ``"profile"`` object. When no profile is present the
    bundled default profile is used.
    """
    data = _load_json(path)
    if not isinstance(data, dict):
        raise SeedError(f'{path}: records must be a JSON object')
    records = DynamicRecords.from_dict(data)
    if records.profile is None:
        records.profile = Profile.from_dict(DEFAULT_PROFILE)
    logger.debug('Loaded %d project records from %s', len(records.projects), path)
    return records
