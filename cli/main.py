#!/usr/bin/env python3
"""Furniture search CLI - main entry point for all commands."""

import logging
from typing import Optional

import click

from .analytics_commands import analytics
from .discovery_commands import discovery
from .search_commands import search
from .synonym_commands import synonyms


@click.group()
@click.option('--project-root', default='.', help='Directory holding .furniture_search/')
@click.option('--db-path', default=None, help='Override the catalog database path')
@click.option('--locale', type=click.Choice(['en', 'fr']), default=None, help='Override the UI locale')
@click.option('--verbose', '-v', is_flag=True, help='Enable debug logging')
@click.pass_context
def main(ctx: click.Context, project_root: str, db_path: Optional[str],
         locale: Optional[str], verbose: bool):
    """Synonym-aware furniture catalog search."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s'
    )
    ctx.ensure_object(dict)
    ctx.obj.update(project_root=project_root, db_path=db_path, locale=locale)


main.add_command(search)
main.add_command(synonyms)
main.add_command(analytics)
main.add_command(discovery)


if __name__ == '__main__':
    main()
