"""Plan emitter for writing a module tree to the filesystem.

This module provides the PlanEmitter class that takes an EmissionPlan and
writes its files under an output root, creating package directories as
needed.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from upath import UPath

from protomod.exceptions import OutputError

if TYPE_CHECKING:
    from protomod.modgen.planner import EmissionPlan

logger = logging.getLogger(__name__)


class PlanEmitter:
    """Writes the files of an EmissionPlan under an output directory.

    Files are written in plan order. Existing files are only replaced when
    the emitter is created with `overwrite=True`; otherwise the run is
    aborted with an OutputError.

    Example:
        >>> emitter = PlanEmitter('./out', overwrite=True)
        >>> written = emitter.emit(plan)
    """

    def __init__(self, output_dir: str | Path | UPath, overwrite: bool = False):
        """Initialize the plan emitter.

        Args:
            output_dir: Root directory the planned relative paths resolve against.
            overwrite: Whether existing files may be replaced.
        """
        self.output_dir = UPath(output_dir)
        self.overwrite = overwrite

    def emit(self, plan: EmissionPlan) -> list[UPath]:
        """Write every planned file.

        Args:
            plan: The emission plan to materialize.

        Returns:
            The paths of the written files, in plan order.

        Raises:
            OutputError: If a file exists and overwriting is disabled, or a
                file or directory cannot be written.
        """
        targets = [
            (self.output_dir / planned.path.as_posix(), planned.content)
            for planned in plan
        ]

        if not self.overwrite:
            self._check_targets([path for path, _ in targets])

        written: list[UPath] = []

        for path, content in targets:
            self._write_file(path, content)
            written.append(path)

        logger.info(f'Wrote {len(written)} files to {self.output_dir}')
        return written

    def _check_targets(self, paths: list[UPath]) -> None:
        """Fail before anything is written if a target file already exists."""
        for path in paths:
            if path.exists():
                raise OutputError(
                    str(path),
                    FileExistsError('file exists and overwrite is disabled'),
                )

    def _write_file(self, path: UPath, content: str) -> None:
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with path.open('w', encoding='utf-8', newline='') as f:
                f.write(content)
        except OSError as e:
            raise OutputError(str(path), e) from e

        logger.debug(f'Wrote {path}')
