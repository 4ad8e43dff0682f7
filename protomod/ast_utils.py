"""AST helpers for rendering generated Python declaration modules."""

import ast
from collections.abc import Iterable

__all__ = ('_child_imports', '_star_import', 'render_module')


def _child_imports(names: Iterable[str]) -> list[ast.ImportFrom]:
    """Build one `from . import <name>` statement per child module."""
    return [
        ast.ImportFrom(
            module=None, names=[ast.alias(name=name, asname=None)], level=1
        )
        for name in names
    ]


def _star_import(module: str) -> ast.ImportFrom:
    return ast.ImportFrom(
        module=module, names=[ast.alias(name='*', asname=None)], level=1
    )


def render_module(body: list[ast.stmt]) -> str:
    """Render a list of statements as Python source.

    Args:
        body: List of AST statement nodes.

    Returns:
        The source code, terminated by a newline. An empty body renders as
        an empty string.
    """
    if not body:
        return ''

    mod = ast.Module(body=body, type_ignores=[])
    ast.fix_missing_locations(mod)

    return ast.unparse(mod) + '\n'
