"""Build orchestration for protomod.

This module provides the Build class that runs the whole pipeline for one
configuration: patch the schemas, compile them with protoc, reorganize the
flat generated output into a package tree and write it to disk. Every stage
fails fast; a partially generated library is never left behind as a
successful result.
"""

import logging
import shutil
import tempfile
from dataclasses import dataclass, field
from pathlib import Path

from upath import UPath

from protomod.compiler import ProtocCompiler, collect_artifacts
from protomod.config import BuildConfig
from protomod.exceptions import OutputError
from protomod.modgen import EmissionPlan, FlatArtifact, PlanEmitter, modularize
from protomod.patcher import patch_protos

__all__ = ('Build', 'BuildResult')

logger = logging.getLogger(__name__)

TEMP_PREFIX = 'protomod-'


@dataclass
class BuildResult:
    """Summary of a completed build.

    Attributes:
        patched_files: Paths of the patched schema copies that were compiled.
        artifacts: The flat artifacts collected from the code generator.
        plan: The emission plan that was written.
        written: Paths of all files written under the output directory.
    """

    patched_files: list[Path] = field(default_factory=list)
    artifacts: list[FlatArtifact] = field(default_factory=list)
    plan: EmissionPlan = field(default_factory=EmissionPlan)
    written: list[UPath] = field(default_factory=list)


class Build:
    """Runs the patch, compile, modularize and emit stages for a config.

    Example:
        >>> from protomod.config import BuildConfig
        >>> config = BuildConfig(source='./proto', output='./out', plugin='myplugin')
        >>> result = Build(config).run()
        >>> len(result.written)
    """

    def __init__(self, config: BuildConfig, compiler: ProtocCompiler | None = None):
        self.config = config
        self.compiler = compiler or ProtocCompiler(
            plugin=config.plugin,
            protoc=config.protoc,
            plugin_options=config.plugin_options,
            include_paths=config.include_paths,
            descriptor_set_out=config.file_descriptor_set,
            include_imports=config.include_imports,
        )

    def _prepare_output(self) -> None:
        output = self.config.output

        if self.config.clean_output and output.exists():
            logger.info(f'Removing previous output directory {output}')
            try:
                shutil.rmtree(output)
            except OSError as e:
                raise OutputError(str(output), e) from e

        try:
            output.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise OutputError(str(output), e) from e

        logger.info(f'Created output directory {output}')

    def _create_temp_dir(self) -> tempfile.TemporaryDirectory:
        temp_parent = self.config.temp_dir

        try:
            if temp_parent is not None:
                temp_parent.mkdir(parents=True, exist_ok=True)
            return tempfile.TemporaryDirectory(
                prefix=TEMP_PREFIX, dir=str(temp_parent) if temp_parent else None
            )
        except OSError as e:
            raise OutputError(str(temp_parent or tempfile.gettempdir()), e) from e

    def run(self) -> BuildResult:
        """Run every stage and return a summary of the build.

        Raises:
            ProtomodError: Any stage failure; nothing is retried.
        """
        result = BuildResult()

        self._prepare_output()

        with self._create_temp_dir() as workdir:
            workdir = Path(workdir)
            logger.info(f'Created temporary working directory {workdir}')

            patched_dir = workdir / 'protos'
            result.patched_files = patch_protos(self.config.source, patched_dir)

            code_dir = workdir / 'code'
            code_dir.mkdir(parents=True, exist_ok=True)

            self.compiler.compile(
                result.patched_files, code_dir, extra_include_paths=[patched_dir]
            )

            result.artifacts = collect_artifacts(
                code_dir, suffix=self.config.artifact_suffix
            )
            logger.info(f'Collected {len(result.artifacts)} generated packages')

            result.plan = modularize(result.artifacts)

        emitter = PlanEmitter(self.config.output, overwrite=self.config.overwrite)
        result.written = emitter.emit(result.plan)

        return result

