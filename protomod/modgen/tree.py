"""Module tree structure for organizing generated packages into a hierarchy.

This module provides the FlatArtifact and ModuleNode dataclasses and the
build_tree function, which turns the flat, one-file-per-package output of a
Protobuf code generator into a tree keyed by package name segments.
"""

from __future__ import annotations

import keyword
import re
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field

from protomod.exceptions import (
    DuplicatePackageError,
    EmptyInputError,
    MalformedPackageNameError,
)

__all__ = (
    'CONTENT_MODULE',
    'RESERVED_SEGMENTS',
    'ROOT_PACKAGE',
    'FlatArtifact',
    'ModuleNode',
    'build_tree',
    'split_package',
)

# Placeholder file name code generators use for schemas without a package.
ROOT_PACKAGE = '_'

# Module holding the generated code of a package that also has subpackages.
CONTENT_MODULE = '_content'

# Segments whose module file would collide with a planned file.
RESERVED_SEGMENTS = frozenset({CONTENT_MODULE, '__init__'})

_SEGMENT_RE = re.compile(r'[A-Za-z_][A-Za-z0-9_]*')


@dataclass(frozen=True)
class FlatArtifact:
    """One generated source file, named after its Protobuf package.

    Attributes:
        package: The dotted Protobuf package name, e.g. "crabs.disney.ariel".
        content: The generated source, exactly as the code generator wrote it.
    """

    package: str
    content: str


@dataclass
class ModuleNode:
    """A node in the module hierarchy.

    Each node may carry the artifact of the package ending at it, child
    modules, or both. The root node has an empty name.

    Attributes:
        name: The package name segment of this node.
        artifact: The artifact attached to this node, if any.
        children: Child modules keyed by their segment name.
    """

    name: str = ''
    artifact: FlatArtifact | None = None
    children: dict[str, ModuleNode] = field(default_factory=dict)

    @property
    def has_content(self) -> bool:
        return self.artifact is not None

    @property
    def has_children(self) -> bool:
        return bool(self.children)

    def attach(self, module_path: list[str], artifact: FlatArtifact) -> None:
        """Attach an artifact at the specified module path.

        Creates intermediate nodes as needed.

        Args:
            module_path: List of package segments, e.g. ["crabs", "disney"].
            artifact: The artifact to attach.

        Raises:
            DuplicatePackageError: If the target node already carries an artifact.
        """
        current = self
        for part in module_path:
            if part not in current.children:
                current.children[part] = ModuleNode(name=part)
            current = current.children[part]

        if current.artifact is not None:
            raise DuplicatePackageError(artifact.package)

        current.artifact = artifact

    def get_node(self, module_path: list[str]) -> ModuleNode | None:
        """Get a node at the specified path.

        Args:
            module_path: List of package segments.

        Returns:
            The node at the path, or None if not found.
        """
        current = self
        for part in module_path:
            if part not in current.children:
                return None
            current = current.children[part]

        return current

    def walk(self) -> Iterator[tuple[list[str], ModuleNode]]:
        """Iterate over all nodes in the tree depth-first.

        Children are visited in lexicographic order of their names so the
        traversal never depends on the order artifacts were attached in.

        Yields:
            Tuples of (module_path, node) for each node in the tree.
        """
        yield from self._walk_recursive([])

    def _walk_recursive(
        self, current_path: list[str]
    ) -> Iterator[tuple[list[str], ModuleNode]]:
        yield current_path, self

        for child_name, child_node in sorted(self.children.items()):
            yield from child_node._walk_recursive(current_path + [child_name])

    def count_artifacts(self) -> int:
        """Count the artifacts attached to this subtree."""
        total = 1 if self.artifact is not None else 0
        for child in self.children.values():
            total += child.count_artifacts()
        return total


def split_package(package: str) -> list[str]:
    """Split a dotted package name into module path segments.

    ROOT_PACKAGE segments are skipped wherever they appear, so the
    placeholder package itself maps to the empty path and `a._` to `['a']`.

    Raises:
        MalformedPackageNameError: If the name cannot be used as a module path.
    """
    if not package:
        raise MalformedPackageNameError(package, 'package name is empty')

    segments = []
    for segment in package.split('.'):
        if not segment:
            raise MalformedPackageNameError(package, 'empty segment')
        if segment == ROOT_PACKAGE:
            continue
        if not _SEGMENT_RE.fullmatch(segment):
            raise MalformedPackageNameError(
                package, f"segment '{segment}' is not a valid identifier"
            )
        if keyword.iskeyword(segment):
            raise MalformedPackageNameError(
                package, f"segment '{segment}' is a Python keyword"
            )
        if segment in RESERVED_SEGMENTS:
            raise MalformedPackageNameError(
                package, f"segment '{segment}' is reserved"
            )
        segments.append(segment)

    return segments


def build_tree(artifacts: Iterable[FlatArtifact]) -> ModuleNode:
    """Build a module tree from flat generated artifacts.

    Args:
        artifacts: The generated artifacts, one per package name.

    Returns:
        The root ModuleNode.

    Raises:
        EmptyInputError: If no artifacts were supplied.
        MalformedPackageNameError: If a package name is not well-formed.
        DuplicatePackageError: If two artifacts share a package name.
    """
    root = ModuleNode()
    count = 0

    for artifact in artifacts:
        root.attach(split_package(artifact.package), artifact)
        count += 1

    if not count:
        raise EmptyInputError()

    return root
