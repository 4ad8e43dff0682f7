"""Emission planning for a module tree.

This module turns a ModuleNode tree into an EmissionPlan: the ordered list of
files (relative path and content) that make every generated package
importable under a module path matching its dotted Protobuf package name.

Layout rules:
    - The root and every node with children become a Python package whose
      `__init__.py` imports each child module, sorted by name.
    - A node with children that also carries generated code stores it in
      `_content.py` and re-exports it from its `__init__.py`.
    - A childless node becomes a plain `<name>.py` module.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from pathlib import PurePosixPath
from typing import Literal

from protomod.ast_utils import _child_imports, _star_import, render_module
from protomod.exceptions import EmptyInputError
from protomod.modgen.tree import CONTENT_MODULE, FlatArtifact, ModuleNode, build_tree

__all__ = ('EmissionPlan', 'PlannedFile', 'modularize', 'plan')

INIT_FILE = '__init__.py'

FileKind = Literal['declaration', 'content']


@dataclass(frozen=True)
class PlannedFile:
    """A single file of an emission plan.

    Attributes:
        path: Path relative to the output root.
        content: The full file content.
        kind: Whether the file declares child modules or holds generated code.
        package: The package the file belongs to, None for the root package.
    """

    path: PurePosixPath
    content: str
    kind: FileKind
    package: str | None = None


@dataclass
class EmissionPlan:
    """Ordered set of files to write, derived from a module tree."""

    files: list[PlannedFile] = field(default_factory=list)

    def __iter__(self) -> Iterator[PlannedFile]:
        return iter(self.files)

    def __len__(self) -> int:
        return len(self.files)

    def paths(self) -> list[PurePosixPath]:
        return [planned.path for planned in self.files]

    def get(self, path: str | PurePosixPath) -> PlannedFile | None:
        """Get the planned file at a relative path, or None if not planned."""
        path = PurePosixPath(path)
        for planned in self.files:
            if planned.path == path:
                return planned
        return None

    def declarations(self) -> list[PlannedFile]:
        return [planned for planned in self.files if planned.kind == 'declaration']

    def contents(self) -> list[PlannedFile]:
        return [planned for planned in self.files if planned.kind == 'content']


def _declaration(node: ModuleNode) -> str:
    body = _child_imports(sorted(node.children))
    if node.has_content:
        body.append(_star_import(CONTENT_MODULE))
    return render_module(body)


def _package_name(module_path: list[str]) -> str | None:
    return '.'.join(module_path) if module_path else None


def plan(root: ModuleNode) -> EmissionPlan:
    """Compute the emission plan for a module tree.

    Nodes are visited depth-first with children in lexicographic order, and
    a package's `__init__.py` is always planned before any of its children,
    so the plan is reproducible regardless of the input artifact order.

    Args:
        root: The root node returned by build_tree.

    Returns:
        The EmissionPlan for the tree.

    Raises:
        EmptyInputError: If the tree carries no artifacts.
    """
    if not root.count_artifacts():
        raise EmptyInputError()

    emission = EmissionPlan()

    for module_path, node in root.walk():
        package = _package_name(module_path)
        directory = PurePosixPath(*module_path)
        is_package = node.has_children or not module_path

        if is_package:
            emission.files.append(
                PlannedFile(
                    path=directory / INIT_FILE,
                    content=_declaration(node),
                    kind='declaration',
                    package=package,
                )
            )

        if node.artifact is not None:
            if is_package:
                path = directory / f'{CONTENT_MODULE}.py'
            else:
                path = directory.parent / f'{node.name}.py'

            emission.files.append(
                PlannedFile(
                    path=path,
                    content=node.artifact.content,
                    kind='content',
                    package=package,
                )
            )

    return emission


def modularize(artifacts: Iterable[FlatArtifact]) -> EmissionPlan:
    """Build the module tree for the artifacts and plan its emission."""
    return plan(build_tree(artifacts))
