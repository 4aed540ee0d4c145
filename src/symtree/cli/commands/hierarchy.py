"""
Hierarchy Commands - Explore callers and type hierarchies from the terminal.

Usage:
    symtree calls src/foo.cpp 42 7
    symtree inheritance src/shape.h 10 7 --depth 3
"""

import asyncio
import json
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console

from ...backend.client import LspHierarchyBackend
from ...config import load_config
from ...core.errors import SymtreeError
from ...hierarchy.controller import HierarchyController, HierarchyKind
from ..utils import build_tree, echo_error, echo_location, echo_warning, make_position, resolve_file

console = Console()


def _hierarchy_options(func):
    func = click.option("--json", "as_json", is_flag=True, help="Print the expanded tree as JSON")(func)
    func = click.option("--depth", "-d", default=2, show_default=True, type=click.IntRange(min=0),
                        help="Levels to expand below the root")(func)
    func = click.option("--config", "config_path", type=click.Path(dir_okay=False), default=None,
                        help="Configuration file (default: .symtree/config.yaml)")(func)
    func = click.option("--root", "-r", "root_dir", type=click.Path(exists=True, file_okay=False),
                        default=".", help="Workspace root indexed by the backend")(func)
    func = click.argument("column", type=click.IntRange(min=1))(func)
    func = click.argument("line", type=click.IntRange(min=1))(func)
    func = click.argument("file", type=click.Path(exists=True, dir_okay=False))(func)
    return func


@click.command()
@_hierarchy_options
def calls(file: str, line: int, column: int, root_dir: str, config_path: Optional[str],
          depth: int, as_json: bool) -> None:
    """
    Show who calls the symbol at FILE:LINE:COLUMN.
    """
    _run(HierarchyKind.CALL, file, line, column, root_dir, config_path, depth, as_json)


@click.command()
@_hierarchy_options
def inheritance(file: str, line: int, column: int, root_dir: str, config_path: Optional[str],
                depth: int, as_json: bool) -> None:
    """
    Show subtypes and supertypes of the type at FILE:LINE:COLUMN.

    Supertypes are grouped under a [[Base]] node.
    """
    _run(HierarchyKind.INHERITANCE, file, line, column, root_dir, config_path, depth, as_json)


def _run(kind: HierarchyKind, file: str, line: int, column: int, root_dir: str,
         config_path: Optional[str], depth: int, as_json: bool) -> None:
    path = resolve_file(file)
    workspace_root = Path(root_dir).resolve()
    try:
        config = load_config(workspace_root, Path(config_path) if config_path else None)
        ok = asyncio.run(_explore(kind, path, line, column, workspace_root, config, depth, as_json))
    except SymtreeError as e:
        echo_error(str(e))
        sys.exit(1)
    if not ok:
        sys.exit(1)


async def _explore(kind, path, line, column, workspace_root, config, depth, as_json) -> bool:
    backend = LspHierarchyBackend(workspace_root, config)
    await backend.start()
    try:
        uri = backend.open_document(path)
        position = make_position(uri, line, column)
        controller = HierarchyController(
            backend,
            navigator=echo_location,
            double_click_timeout_ms=config.tree_views.double_click_timeout_ms,
            paths=backend.paths,
        )

        if kind == HierarchyKind.CALL:
            result = await controller.open_call_hierarchy(position)
        else:
            result = await controller.open_inheritance_hierarchy(position)

        if result.is_err():
            echo_error(f"Could not open {kind} hierarchy: {result.error}")
            return False

        root = result.unwrap()
        if root is None:
            echo_warning("Hierarchy was replaced before it finished loading")
            return False

        tree = await build_tree(controller, kind, root, depth, config.icons)
        if as_json:
            click.echo(json.dumps(root.to_wire(), indent=2))
        else:
            console.print(tree)
        return True
    finally:
        await backend.stop()
