"""
CLI Utilities - Shared helpers for the command line view.

Printing helpers, logging setup, and the bits that turn command line
arguments into backend positions and hierarchy nodes into rich trees.
"""

import logging
from pathlib import Path
from typing import Optional

import click
from lsprotocol import types as lsp
from rich.markup import escape
from rich.tree import Tree

from ..core.errors import SymtreeError
from ..core.types import HierarchyNode
from ..hierarchy.controller import HierarchyController, HierarchyKind
from ..hierarchy.render import CollapseState, IconTheme, to_tree_item


def setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(message)s",
    )


def echo_error(message: str) -> None:
    """
    Print an error message with a red cross.

    Args:
        message (str): The error message to display.
    """
    click.echo(click.style(f"❌ {message}", fg="red"), err=True)


def echo_warning(message: str) -> None:
    click.echo(click.style(f"⚠️  {message}", fg="yellow"))


def echo_location(location: lsp.Location, preserve_focus: bool = True) -> None:
    """Navigator for the terminal: print where the editor would jump."""
    start = location.range.start
    click.echo(f"{location.uri}:{start.line + 1}:{start.character + 1}")


def make_position(uri: str, line: int, column: int) -> lsp.TextDocumentPositionParams:
    """Build a backend position from 1-based editor coordinates."""
    if line < 1 or column < 1:
        raise click.BadParameter("LINE and COLUMN are 1-based")
    return lsp.TextDocumentPositionParams(
        text_document=lsp.TextDocumentIdentifier(uri=uri),
        position=lsp.Position(line=line - 1, character=column - 1),
    )


def styled_label(node: HierarchyNode, icons: Optional[IconTheme] = None) -> str:
    item = to_tree_item(node, icons)
    label = escape(item.label)
    if node.synthetic:
        label = f"[italic]{label}[/italic]"
    if item.icon:
        label = f"{escape(item.icon)} {label}"
    if item.collapsible_state == CollapseState.COLLAPSED:
        label += f" [dim]({node.num_children})[/dim]"
    return label


async def build_tree(
    controller: HierarchyController,
    kind: HierarchyKind,
    root: HierarchyNode,
    depth: int,
    icons: Optional[IconTheme] = None,
) -> Tree:
    """
    Expand ``root`` up to ``depth`` levels through the controller and render it.

    Children are requested the way a tree view does, so nodes the backend did
    not materialize are fetched lazily. A failed expansion becomes a red leaf.
    """
    tree = Tree(styled_label(root, icons))
    await _add_children(controller, kind, root, tree, depth, icons)
    return tree


async def _add_children(
    controller: HierarchyController,
    kind: HierarchyKind,
    node: HierarchyNode,
    branch: Tree,
    depth: int,
    icons: Optional[IconTheme],
) -> None:
    if not node.is_expandable or depth <= 0:
        return
    try:
        children = await controller.get_children(kind, node)
    except SymtreeError as e:
        branch.add(f"[red]failed to expand: {escape(str(e))}[/red]")
        return
    for child in children:
        sub = branch.add(styled_label(child, icons))
        await _add_children(controller, kind, child, sub, depth - 1, icons)


def resolve_file(file: str) -> Path:
    path = Path(file).expanduser().resolve()
    if not path.is_file():
        raise click.BadParameter(f"{file} is not a file", param_hint="FILE")
    return path
