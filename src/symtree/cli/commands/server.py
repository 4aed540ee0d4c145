"""
Server Commands - Inspect and control the backend.
"""

import asyncio
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.panel import Panel

from ...backend.client import LspHierarchyBackend
from ...config import load_config
from ...core.errors import SymtreeError
from ..utils import echo_error

console = Console()


def _backend(root_dir: str, config_path: Optional[str]) -> LspHierarchyBackend:
    workspace_root = Path(root_dir).resolve()
    config = load_config(workspace_root, Path(config_path) if config_path else None)
    return LspHierarchyBackend(workspace_root, config)


@click.command()
@click.option("--root", "-r", "root_dir", type=click.Path(exists=True, file_okay=False), default=".",
              help="Workspace root indexed by the backend")
@click.option("--config", "config_path", type=click.Path(dir_okay=False), default=None,
              help="Configuration file (default: .symtree/config.yaml)")
def info(root_dir: str, config_path: Optional[str]) -> None:
    """
    Show index statistics reported by the backend.
    """

    async def _info():
        backend = _backend(root_dir, config_path)
        await backend.start()
        try:
            return await backend.info()
        finally:
            await backend.stop()

    try:
        stats = asyncio.run(_info())
    except SymtreeError as e:
        echo_error(str(e))
        sys.exit(1)

    console.print(Panel(stats.tooltip_text(), title=f"backend: {stats.status_text()}"))


@click.command()
@click.option("--root", "-r", "root_dir", type=click.Path(exists=True, file_okay=False), default=".",
              help="Workspace root indexed by the backend")
@click.option("--config", "config_path", type=click.Path(dir_okay=False), default=None,
              help="Configuration file (default: .symtree/config.yaml)")
def reload(root_dir: str, config_path: Optional[str]) -> None:
    """
    Ask the backend to reload the project and re-index.
    """

    async def _reload():
        backend = _backend(root_dir, config_path)
        await backend.start()
        try:
            backend.reload()
        finally:
            await backend.stop()

    try:
        asyncio.run(_reload())
    except SymtreeError as e:
        echo_error(str(e))
        sys.exit(1)

    click.echo(click.style("✅ Reload requested", fg="green"))
