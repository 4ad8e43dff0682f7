"""Code generator boundary: running protoc and collecting its output.

The Protobuf compiler and its code generator plugin are treated as an opaque
external dependency. The only contract protomod relies on is that the plugin
writes one flat source file per Protobuf package, named after the dotted
package (e.g. `crabs.disney.ariel.py`, or `_.py` for schemas without a
package).
"""

import logging
import shutil
import subprocess
from pathlib import Path

from protomod.exceptions import ArtifactError, CompilationError
from protomod.modgen.tree import FlatArtifact

__all__ = ('ProtocCompiler', 'collect_artifacts')

logger = logging.getLogger(__name__)


class ProtocCompiler:
    """Runs protoc with a code generator plugin.

    Example:
        >>> compiler = ProtocCompiler(plugin='myplugin', include_paths=['./protos'])
        >>> compiler.compile(['./protos/crabs/Ferris.proto'], './code')
    """

    def __init__(
        self,
        plugin: str,
        protoc: str = 'protoc',
        plugin_options: list[str] | None = None,
        include_paths: list[str | Path] | None = None,
        descriptor_set_out: str | Path | None = None,
        include_imports: bool = True,
    ):
        """Initialize the compiler.

        Args:
            plugin: Plugin name as used in `--<plugin>_out`.
            protoc: Name or path of the protoc executable.
            plugin_options: Values passed to the plugin via `--<plugin>_opt`.
            include_paths: Directories added to the import path, in order.
            descriptor_set_out: Where to store a FileDescriptorSet, if wanted.
            include_imports: Whether the descriptor set includes all imports.
        """
        self.plugin = plugin
        self.protoc = protoc
        self.plugin_options = list(plugin_options or [])
        self.include_paths = [Path(p) for p in include_paths or []]
        self.descriptor_set_out = (
            Path(descriptor_set_out) if descriptor_set_out else None
        )
        self.include_imports = include_imports

    def build_command(
        self,
        files: list[str | Path],
        out_dir: str | Path,
        extra_include_paths: list[str | Path] | None = None,
    ) -> list[str]:
        """Build the protoc command line for the given schema files."""
        include_paths = [*self.include_paths, *(extra_include_paths or [])]

        cmd = [self.protoc]
        cmd.extend(f'--proto_path={path}' for path in include_paths)
        cmd.append(f'--{self.plugin}_out={out_dir}')
        cmd.extend(f'--{self.plugin}_opt={opt}' for opt in self.plugin_options)

        if self.descriptor_set_out:
            cmd.append(f'--descriptor_set_out={self.descriptor_set_out}')
            if self.include_imports:
                cmd.append('--include_imports')

        cmd.extend(str(f) for f in files)
        return cmd

    def compile(
        self,
        files: list[str | Path],
        out_dir: str | Path,
        extra_include_paths: list[str | Path] | None = None,
    ) -> None:
        """Compile the schema files into `out_dir`.

        `extra_include_paths` are searched after the configured include paths.

        Raises:
            CompilationError: If there is nothing to compile, protoc cannot be
                found, or protoc exits with a non-zero status.
        """
        if not files:
            raise CompilationError('No protobuf files to compile')

        if shutil.which(self.protoc) is None:
            raise CompilationError(f"protoc executable '{self.protoc}' not found")

        Path(out_dir).mkdir(parents=True, exist_ok=True)
        if self.descriptor_set_out:
            self.descriptor_set_out.parent.mkdir(parents=True, exist_ok=True)

        cmd = self.build_command(files, out_dir, extra_include_paths)
        logger.debug(f'Running: {" ".join(cmd)}')

        try:
            result = subprocess.run(cmd, capture_output=True, text=True)
        except OSError as e:
            raise CompilationError(
                f'Failed to run {self.protoc}', command=cmd, stderr=str(e)
            ) from e

        if result.returncode != 0:
            raise CompilationError(
                f'protoc exited with status {result.returncode}',
                command=cmd,
                stderr=result.stderr,
            )

        logger.info(f'Compiled {len(files)} protobuf files into {out_dir}')


def collect_artifacts(
    directory: str | Path, suffix: str = '.py'
) -> list[FlatArtifact]:
    """Read the flat generated files of a directory.

    The package name of each artifact is its file name without `suffix`.
    Files are returned sorted by path; the planner does not depend on it.

    Args:
        directory: Directory containing the generated files.
        suffix: File name suffix of generated files.

    Raises:
        ArtifactError: If a generated file cannot be read.
    """
    directory = Path(directory)
    artifacts: list[FlatArtifact] = []

    for path in sorted(directory.rglob(f'*{suffix}')):
        if not path.is_file():
            continue

        try:
            with path.open(encoding='utf-8', newline='') as f:
                content = f.read()
        except (OSError, UnicodeDecodeError) as e:
            raise ArtifactError(str(path), e) from e

        package = path.name[: -len(suffix)] if suffix else path.name
        artifacts.append(FlatArtifact(package=package, content=content))
        logger.debug(f'Collected package {package!r} from {path}')

    return artifacts
