"""
symtree CLI - Main entry point.

This module registers all CLI commands. Each command is implemented
in its own module under cli/commands/.
"""

import click

from .commands import hierarchy, server
from .utils import setup_logging


@click.group()
@click.version_option(package_name="symtree")
@click.option("--verbose", "-v", is_flag=True, help="Log backend traffic to stderr")
def main(verbose: bool):
    """symtree: Explore call and inheritance hierarchies.

    Queries a code-intelligence server and expands the
    hierarchy lazily, one level per request.

    \b
    Quick Start:
      symtree calls src/main.cpp 42 7
      symtree inheritance src/shape.h 10 7 --depth 3
      symtree info
    """
    setup_logging(verbose)


main.add_command(hierarchy.calls)
main.add_command(hierarchy.inheritance)
main.add_command(server.info)
main.add_command(server.reload)

if __name__ == "__main__":
    main()
