"""Test fixtures for protomod tests.

This module provides sample Protobuf schemas and flat generated artifacts
shaped like the output of a one-file-per-package code generator.
"""

from protomod.modgen import FlatArtifact

FERRIS_PROTO = '''edition = "2023";

package crabs;

enum FerrisType {
  FERRIS_TYPE_UNSPECIFIED = 0;
  FERRIS_TYPE_CORRO = 1;
}

message Ferris {
  FerrisType type = 1;
}
'''

MR_KRABS_PROTO = '''syntax = "proto3";

package crabs.sponge_bob;

message MrKrabs {
  string name = 1;
}
'''

SEBASTIAN_PROTO = '''/* Sebastian lives under the sea */
edition = "2023";

package crabs.disney.ariel;

message Sebastian {
  string song = 1;
}
'''

SCHEMAS = {
    'crabs/Ferris.proto': FERRIS_PROTO,
    'crabs/sponge_bob/MrKrabs.proto': MR_KRABS_PROTO,
    'crabs/disney/ariel/Sebastian.proto': SEBASTIAN_PROTO,
}

# Flat generated files, keyed by file name.
GENERATED_FILES = {
    'crabs.py': 'class Ferris:\n    pass\n',
    'crabs.sponge_bob.py': 'class MrKrabs:\n    pass\n',
    'crabs.disney.ariel.py': 'class Sebastian:\n    pass\n',
}

CRAB_ARTIFACTS = [
    FlatArtifact(package='crabs', content='class Ferris:\n    pass\n'),
    FlatArtifact(package='crabs.sponge_bob', content='class MrKrabs:\n    pass\n'),
    FlatArtifact(
        package='crabs.disney.ariel', content='class Sebastian:\n    pass\n'
    ),
]


def write_files(root, files: dict[str, str]) -> None:
    """Write a mapping of relative paths to contents under a directory."""
    for relative, content in files.items():
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
