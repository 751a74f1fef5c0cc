#!/usr/bin/env python3
"""
termfolio.filesystem - An immutable virtual filesystem with symlinks.

The tree is built once from a declarative description plus dynamic
records (projects and a profile) and never changes afterwards. Path
resolution follows symlinks, including relative ones.

Core philosophy:
- Every node is immutable; children are exposed as read-only mappings
- Building the tree is a pure function of its inputs
- Lookups that fail return None rather than raising
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple, Union

logger = logging.getLogger(__name__)

# Maximum number of symlinks followed while resolving a single path.
MAX_SYMLINK_DEPTH = 40

DEFAULT_HOME = '/home/guest'

Content = Union[str, Callable[[], str], None]


class SeedError(ValueError):
    """Raised when a filesystem description is malformed."""


class NodeType(str, Enum):
    """Kinds of filesystem nodes."""
    DIRECTORY = 'directory'
    FILE = 'file'
    EXECUTABLE = 'executable'
    SYMLINK = 'symlink'


@dataclass(frozen=True)
class FSNode:
    """A single node of the virtual tree."""
    name: str
    type: NodeType
    children: Mapping[str, 'FSNode'] = field(default_factory=dict)
    content: Content = None
    target: Optional[str] = None
    icon: Optional[str] = None
    meta: Mapping[str, Any] = field(default_factory=dict)

    def __init__(self, name: str, type: NodeType,
                 children: Optional[Dict[str, 'FSNode']] = None,
                 content: Content = None, target: Optional[str] = None,
                 icon: Optional[str] = None,
                 meta: Optional[Dict[str, Any]] = None):
        node_type = NodeType(type)
        if node_type == NodeType.SYMLINK:
            if not target:
                raise SeedError(f"symlink '{name}' has no target")
            if children:
                raise SeedError(f"symlink '{name}' cannot have children")
        object.__setattr__(self, 'name', name)
        object.__setattr__(self, 'type', node_type)
        object.__setattr__(self, 'children', MappingProxyType(dict(children or {})))
        object.__setattr__(self, 'content', content)
        object.__setattr__(self, 'target', target)
        object.__setattr__(self, 'icon', icon)
        object.__setattr__(self, 'meta', MappingProxyType(dict(meta or {})))

    def is_dir(self) -> bool:
        return self.type == NodeType.DIRECTORY

    def is_file(self) -> bool:
        """Regular files and executables both carry content."""
        return self.type in (NodeType.FILE, NodeType.EXECUTABLE)

    def is_executable(self) -> bool:
        return self.type == NodeType.EXECUTABLE

    def is_symlink(self) -> bool:
        return self.type == NodeType.SYMLINK

    def is_hidden(self) -> bool:
        return self.name.startswith('.')

    def read(self) -> str:
        """Return the node's content, computing it if it is lazy."""
        if callable(self.content):
            return self.content()
        return self.content or ''


@dataclass
class Project:
    """A project record spliced into the projects directory."""
    name: str
    description: str = ''
    readme: str = ''
    stars: int = 0
    forks: int = 0
    language: Optional[str] = None
    url: str = ''
    homepage: Optional[str] = None
    updated_at: str = ''
    topics: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any], name: Optional[str] = None) -> 'Project':
        """Build a project from a JSON-style mapping."""
        project_name = name or data.get('name')
        if not project_name:
            raise SeedError('project record has no name')
        return cls(
            name=project_name,
            description=data.get('description') or '',
            readme=data.get('readme') or '',
            stars=int(data.get('stars') or 0),
            forks=int(data.get('forks') or 0),
            language=data.get('language'),
            url=data.get('url') or '',
            homepage=data.get('homepage'),
            updated_at=data.get('updated_at') or '',
            topics=list(data.get('topics') or []),
        )


@dataclass
class Profile:
    """The owner profile rendered into the profile file."""
    name: str
    title: str = ''
    bio: str = ''
    location: str = ''
    email: str = ''
    github: str = ''
    linkedin: str = ''
    skills: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Profile':
        if not data.get('name'):
            raise SeedError('profile record has no name')
        return cls(
            name=data['name'],
            title=data.get('title') or '',
            bio=data.get('bio') or '',
            location=data.get('location') or '',
            email=data.get('email') or '',
            github=data.get('github') or '',
            linkedin=data.get('linkedin') or '',
            skills=list(data.get('skills') or []),
        )

    def to_markdown(self) -> str:
        """Render the profile as the markdown shown in the profile file."""
        lines = [f'# {self.name}', '']
        if self.title:
            lines.extend([f'**{self.title}**', ''])
        if self.bio:
            lines.extend([self.bio, ''])
        contact = [
            ('Location', self.location),
            ('Email', self.email),
            ('GitHub', self.github),
            ('LinkedIn', self.linkedin),
        ]
        contact = [(label, value) for label, value in contact if value]
        if contact:
            lines.extend(['## Contact', ''])
            lines.extend(f'- {label}: {value}' for label, value in contact)
            lines.append('')
        if self.skills:
            lines.extend(['## Skills', ''])
            lines.extend(f'- {skill}' for skill in self.skills)
        return '\n'.join(lines).rstrip() + '\n'


@dataclass
class DynamicRecords:
    """Records spliced into the tree at build time."""
    projects: List[Project] = field(default_factory=list)
    profile: Optional[Profile] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'DynamicRecords':
        """
        Accept either a list of projects or a ``{name: project}`` mapping
        under the ``projects`` key, plus an optional ``profile``.
        """
        raw_projects = data.get('projects') or []
        if isinstance(raw_projects, dict):
            projects = [Project.from_dict(value, name=key)
                        for key, value in raw_projects.items()]
        else:
            projects = [Project.from_dict(value) for value in raw_projects]
        profile = data.get('profile')
        return cls(
            projects=projects,
            profile=Profile.from_dict(profile) if profile else None,
        )

    def get_project(self, name: str) -> Optional[Project]:
        for project in self.projects:
            if project.name == name:
                return project
        return None


def _join(parent: str, name: str) -> str:
    return f'/{name}' if parent == '/' else f'{parent}/{name}'


def _split(path: str) -> List[str]:
    return [part for part in path.split('/') if part]


def _collapse(parts: List[str]) -> str:
    """Collapse '.' and '..' segments into an absolute path."""
    stack: List[str] = []
    for part in parts:
        if part == '.' or not part:
            continue
        if part == '..':
            if stack:
                stack.pop()
            continue
        stack.append(part)
    return '/' + '/'.join(stack)


class _Builder:
    """Turns a declarative description into an FSNode tree."""

    def __init__(self, records: DynamicRecords):
        self.records = records
        self.projects_path: Optional[str] = None
        self.profile_path: Optional[str] = None

    def build_children(self, desc: Mapping[str, Any], path: str) -> Dict[str, FSNode]:
        if not isinstance(desc, Mapping):
            raise SeedError(f'children of {path} must be a mapping')
        children = {}
        for name, entry in desc.items():
            if not name or '/' in name:
                raise SeedError(f'invalid node name {name!r} under {path}')
            children[name] = self.build_node(name, entry, _join(path, name))
        return children

    def build_node(self, name: str, desc: Any, path: str) -> FSNode:
        if not isinstance(desc, Mapping):
            raise SeedError(f'node {path} must be a mapping')
        try:
            node_type = NodeType(desc.get('type'))
        except ValueError:
            raise SeedError(f"node {path} has unknown type {desc.get('type')!r}")

        dynamic = desc.get('dynamic')
        if dynamic not in (None, 'projects', 'profile'):
            raise SeedError(f'node {path} has unknown dynamic marker {dynamic!r}')

        children = {}
        if node_type == NodeType.DIRECTORY:
            children = self.build_children(desc.get('children') or {}, path)
        elif desc.get('children'):
            raise SeedError(f'only directories can have children ({path})')

        content = desc.get('content')
        meta: Dict[str, Any] = {}

        if dynamic == 'projects':
            if node_type != NodeType.DIRECTORY:
                raise SeedError(f"'projects' marker on non-directory {path}")
            self.projects_path = path
            for project in self.records.projects:
                filename = f'{project.name}.md'
                children[filename] = FSNode(
                    filename, NodeType.FILE,
                    content=project.readme or f'# {project.name}\n\n{project.description}\n',
                    icon='markdown',
                    meta={'project': project.name},
                )
        elif dynamic == 'profile':
            if node_type != NodeType.FILE:
                raise SeedError(f"'profile' marker on non-file {path}")
            self.profile_path = path
            profile = self.records.profile
            if profile is not None:
                content = profile.to_markdown
            meta['profile'] = True

        return FSNode(
            name, node_type,
            children=children,
            content=content,
            target=desc.get('target'),
            icon=desc.get('icon'),
            meta=meta,
        )


def build_filesystem(description: Mapping[str, Any],
                     records: Optional[DynamicRecords] = None) -> FSNode:
    """
    Build the root node from a description and dynamic records.

    The description is either ``{'version': ..., 'root': {...}}`` or a bare
    mapping of the root directory's children.
    """
    root, _, _ = _build(description, records or DynamicRecords())
    return root


def _build(description: Mapping[str, Any],
           records: DynamicRecords) -> Tuple[FSNode, Optional[str], Optional[str]]:
    if not isinstance(description, Mapping):
        raise SeedError('filesystem description must be a mapping')
    desc = description
    if 'root' in description and set(description) <= {'version', 'root'}:
        desc = description['root']
    builder = _Builder(records)
    children = builder.build_children(desc, '/')
    root = FSNode('', NodeType.DIRECTORY, children=children)
    return root, builder.projects_path, builder.profile_path


class Filesystem:
    """
    Read-only view over an FSNode tree.

    All path arguments may be absolute or relative; relative paths are
    taken from ``/`` unless a cwd is supplied to normalize_path first.
    """

    def __init__(self, root: FSNode, home: str = DEFAULT_HOME,
                 records: Optional[DynamicRecords] = None,
                 projects_path: Optional[str] = None,
                 profile_path: Optional[str] = None):
        if not root.is_dir():
            raise SeedError('filesystem root must be a directory')
        self.root = root
        self.home = home
        self.records = records or DynamicRecords()
        self.projects_path = projects_path
        self.profile_path = profile_path

    @classmethod
    def from_description(cls, description: Mapping[str, Any],
                         records: Optional[DynamicRecords] = None,
                         home: str = DEFAULT_HOME) -> 'Filesystem':
        records = records or DynamicRecords()
        root, projects_path, profile_path = _build(description, records)
        return cls(root, home=home, records=records,
                   projects_path=projects_path, profile_path=profile_path)

    @classmethod
    def default(cls) -> 'Filesystem':
        """The stock tree shipped with the package."""
        from .seed import DEFAULT_FILESYSTEM, default_records
        return cls.from_description(DEFAULT_FILESYSTEM, default_records())

    # Path helpers

    def normalize_path(self, path: str, cwd: str = '/') -> str:
        """Expand ``~`` and collapse ``.``/``..`` into an absolute path."""
        if path == '~' or path.startswith('~/'):
            path = self.home + path[1:]
        elif not path.startswith('/'):
            path = f'{cwd.rstrip("/")}/{path}'
        return _collapse(path.split('/'))

    @staticmethod
    def get_basename(path: str) -> str:
        parts = _split(path)
        return parts[-1] if parts else '/'

    @staticmethod
    def get_parent_path(path: str) -> str:
        parts = _split(path)
        return '/' + '/'.join(parts[:-1])

    # Resolution

    def resolve_path(self, path: str) -> Optional[FSNode]:
        """Return the node at ``path`` with every symlink followed."""
        resolved = self._walk(path, 0)
        return resolved[0] if resolved else None

    def resolve_path_with_symlinks(self, path: str) -> Tuple[Optional[FSNode], str]:
        """
        Resolve ``path`` and also return the canonical path reached.

        When resolution fails the normalized input path is returned
        alongside None.
        """
        resolved = self._walk(path, 0)
        if resolved is None:
            return None, _collapse(path.split('/'))
        return resolved

    def _walk(self, path: str, depth: int) -> Optional[Tuple[FSNode, str]]:
        parts = _split(_collapse(path.split('/')))
        node = self.root
        actual = '/'
        for part in parts:
            if not node.is_dir():
                return None
            child = node.children.get(part)
            if child is None:
                return None
            if child.is_symlink():
                followed = self._follow(child, actual, depth)
                if followed is None:
                    return None
                node, actual = followed
                depth += 1
            else:
                node = child
                actual = _join(actual, part)
        return node, actual

    def _follow(self, link: FSNode, parent: str, depth: int) -> Optional[Tuple[FSNode, str]]:
        if depth >= MAX_SYMLINK_DEPTH:
            logger.warning('Too many levels of symbolic links at %s',
                           _join(parent, link.name))
            return None
        target = link.target
        if not target.startswith('/'):
            target = f'{parent.rstrip("/")}/{target}'
        return self._walk(target, depth + 1)

    def list_directory(self, path: str) -> Optional[List[FSNode]]:
        """Children of the directory at ``path`` sorted by name."""
        node = self.resolve_path(path)
        if node is None or not node.is_dir():
            return None
        return [node.children[name] for name in sorted(node.children)]

    @staticmethod
    def get_file_content(node: Optional[FSNode]) -> Optional[str]:
        if node is None or node.is_dir():
            return None
        return node.read()

    def exists(self, path: str) -> bool:
        return self.resolve_path(path) is not None

    # Dynamic records

    @property
    def profile(self) -> Optional[Profile]:
        return self.records.profile

    def project_names(self) -> List[str]:
        return sorted(project.name for project in self.records.projects)

    def get_project(self, name: str) -> Optional[Project]:
        return self.records.get_project(name)

    def project_for_path(self, actual_path: str) -> Optional[str]:
        """Name of the project a canonical file path belongs to, if any."""
        if not self.projects_path:
            return None
        if self.get_parent_path(actual_path) != self.projects_path:
            return None
        node = self.resolve_path(actual_path)
        if node is None:
            return None
        return node.meta.get('project')
