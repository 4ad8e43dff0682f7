"""Module tree generation for protomod.

This package turns the flat, one-file-per-package output of a Protobuf code
generator into a Python package tree mirroring the Protobuf package
hierarchy.

Classes:
    FlatArtifact: A generated source file named after its package.
    ModuleNode: Tree structure representing the package hierarchy.
    EmissionPlan: Ordered files to write for a module tree.
    PlannedFile: A single file of an emission plan.
    PlanEmitter: Writes an emission plan to the filesystem.
"""

from protomod.modgen.emitter import PlanEmitter
from protomod.modgen.planner import EmissionPlan, PlannedFile, modularize, plan
from protomod.modgen.tree import (
    CONTENT_MODULE,
    ROOT_PACKAGE,
    FlatArtifact,
    ModuleNode,
    build_tree,
    split_package,
)

__all__ = [
    'CONTENT_MODULE',
    'ROOT_PACKAGE',
    'EmissionPlan',
    'FlatArtifact',
    'ModuleNode',
    'PlanEmitter',
    'PlannedFile',
    'build_tree',
    'modularize',
    'plan',
    'split_package',
]
