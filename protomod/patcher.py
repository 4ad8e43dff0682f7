"""Rewrites edition declarations in Protobuf schema files.

Code generators that predate Protobuf editions reject schemas starting with
`edition = "2023";`. The patcher replaces such a declaration with
`syntax = "proto3"` and leaves the rest of the file untouched, byte for byte.

Only the declaration at the top of a file is considered: leading whitespace
and comments are skipped, and if the first token is anything other than
`edition` the file is copied unchanged. Comments inside the declaration
itself are dropped along with it.
"""

import enum
import logging
import re
from pathlib import Path

from protomod.exceptions import SchemaPatchError

__all__ = ('PatchOutcome', 'patch_edition', 'patch_file', 'patch_protos')

logger = logging.getLogger(__name__)

SYNTAX_DECLARATION = 'syntax = "proto3"'

# Whitespace, line comments and block comments. Possessive quantifiers keep
# the scan linear on long comment runs.
_TRIVIA = r'(?:\s|//[^\n]*+|/\*.*?\*/)*+'

_EDITION_RE = re.compile(
    rf"""
    \A{_TRIVIA}
    (?P<declaration>
        edition
        (?![A-Za-z0-9_])
        {_TRIVIA} = {_TRIVIA}
        "(?:[^"\\]|\\.)*"
    )
    """,
    re.DOTALL | re.VERBOSE,
)


class PatchOutcome(enum.Enum):
    UNTOUCHED = 'untouched'
    REPLACED = 'replaced'


def patch_edition(text: str) -> tuple[str, PatchOutcome]:
    """Replace a leading edition declaration with a proto3 syntax declaration.

    Args:
        text: The schema source.

    Returns:
        The patched source and whether a declaration was replaced.

    Example:
        >>> patch_edition('edition = "2023";\\n')
        ('syntax = "proto3";\\n', <PatchOutcome.REPLACED: 'replaced'>)
    """
    match = _EDITION_RE.match(text)
    if match is None:
        return text, PatchOutcome.UNTOUCHED

    start, end = match.span('declaration')
    return text[:start] + SYNTAX_DECLARATION + text[end:], PatchOutcome.REPLACED


def patch_file(src: str | Path, dst: str | Path) -> PatchOutcome:
    """Copy a schema file, patching its edition declaration on the way.

    Line endings are preserved as they appear in the source file.

    Raises:
        SchemaPatchError: If the source cannot be read or the copy cannot
            be written.
    """
    src = Path(src)
    dst = Path(dst)

    try:
        with src.open(encoding='utf-8', newline='') as f:
            text = f.read()
    except (OSError, UnicodeDecodeError) as e:
        raise SchemaPatchError(str(src), e) from e

    patched, outcome = patch_edition(text)

    try:
        dst.parent.mkdir(parents=True, exist_ok=True)
        with dst.open('w', encoding='utf-8', newline='') as f:
            f.write(patched)
    except OSError as e:
        raise SchemaPatchError(str(dst), e) from e

    return outcome


def patch_protos(source_dir: str | Path, dest_dir: str | Path) -> list[Path]:
    """Patch every `.proto` file below a directory into another directory.

    Relative paths are kept, so `dest_dir` can be used as a Protobuf include
    path in place of `source_dir`.

    Args:
        source_dir: Directory containing the original schemas.
        dest_dir: Directory receiving the patched copies.

    Returns:
        Sorted paths of the patched copies.

    Raises:
        SchemaPatchError: If the source directory does not exist or a file
            cannot be patched.
    """
    source_dir = Path(source_dir)
    dest_dir = Path(dest_dir)

    if not source_dir.is_dir():
        raise SchemaPatchError(
            str(source_dir), NotADirectoryError('source is not a directory')
        )

    patched: list[Path] = []
    replaced = 0

    for src in sorted(source_dir.rglob('*.proto')):
        if not src.is_file():
            continue

        dst = dest_dir / src.relative_to(source_dir)
        outcome = patch_file(src, dst)
        if outcome is PatchOutcome.REPLACED:
            replaced += 1
            logger.debug(f'Replaced edition declaration in {src}')

        patched.append(dst)

    if not patched:
        logger.warning(f'No .proto files found in {source_dir}')

    logger.info(
        f'Patched {len(patched)} schema files into {dest_dir} '
        f'({replaced} edition declarations replaced)'
    )
    return patched
