"""protomod - Compile protobuf files into a Python package tree.

protomod patches Protobuf schemas that use editions back to proto3 syntax,
runs protoc with a code generator plugin that writes one flat file per
Protobuf package, and reorganizes that output into a package tree whose
module paths mirror the dotted Protobuf package names.

The plugin must write one flat `<package>.py` file per Protobuf package
(`_.py` for schemas without a package); generators that write one file per
schema, such as protoc's built-in `python`, do not fit.

Quick Start:
    >>> from protomod import Build, BuildConfig
    >>>
    >>> config = BuildConfig(source="./proto", output="./out", plugin="myplugin")
    >>> Build(config).run()

Library Usage:
    >>> from protomod import FlatArtifact, modularize
    >>>
    >>> plan = modularize([
    ...     FlatArtifact("crabs", "class Ferris: ...\\n"),
    ...     FlatArtifact("crabs.disney.ariel", "class Sebastian: ...\\n"),
    ... ])
    >>> [str(path) for path in plan.paths()]
    ['__init__.py', 'crabs/__init__.py', 'crabs/_content.py', ...]

CLI Usage:
    $ protomod generate ./proto --plugin myplugin --output ./out
    $ protomod patch ./proto ./patched
    $ protomod modularize ./flat ./out
"""

from protomod.build import Build, BuildResult
from protomod.compiler import ProtocCompiler, collect_artifacts
from protomod.config import BuildConfig, get_config, load_config_data
from protomod.exceptions import (
    ArtifactError,
    CompilationError,
    ConfigurationError,
    DuplicatePackageError,
    EmptyInputError,
    MalformedPackageNameError,
    OutputError,
    PlanningError,
    ProtomodError,
    SchemaPatchError,
)
from protomod.modgen import (
    EmissionPlan,
    FlatArtifact,
    ModuleNode,
    PlanEmitter,
    PlannedFile,
    build_tree,
    modularize,
    plan,
)
from protomod.patcher import PatchOutcome, patch_edition, patch_file, patch_protos

__all__ = [
    # Pipeline
    'Build',
    'BuildResult',
    'ProtocCompiler',
    'collect_artifacts',
    # Module tree
    'FlatArtifact',
    'ModuleNode',
    'EmissionPlan',
    'PlannedFile',
    'PlanEmitter',
    'build_tree',
    'plan',
    'modularize',
    # Schema patching
    'PatchOutcome',
    'patch_edition',
    'patch_file',
    'patch_protos',
    # Configuration
    'BuildConfig',
    'get_config',
    'load_config_data',
    # Exceptions
    'ProtomodError',
    'PlanningError',
    'MalformedPackageNameError',
    'DuplicatePackageError',
    'EmptyInputError',
    'SchemaPatchError',
    'CompilationError',
    'ArtifactError',
    'ConfigurationError',
    'OutputError',
]

# Version is written by setuptools-scm at build time
try:
    from protomod._version import version as __version__
except ImportError:
    __version__ = 'unknown'
