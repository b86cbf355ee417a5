"""Search CLI command."""

from typing import Optional

import click

from search.exceptions import SearchUnavailableError
from .common import echo_json, load_engine


@click.command()
@click.argument('query')
@click.option('--page', default=1, type=int, help='Page number')
@click.option('--per-page', default=None, type=int, help='Results per page')
@click.option('--category', default=None, help='Category slug being browsed')
@click.option('--favorites-of', default=None, type=int, help='Only search this user\'s favorites')
@click.option('--json', 'as_json', is_flag=True, help='Print the raw response')
@click.pass_context
def search(ctx: click.Context, query: str, page: int, per_page: Optional[int],
           category: Optional[str], favorites_of: Optional[int], as_json: bool):
    """Search the catalog."""
    engine = load_engine(ctx)
    try:
        response = engine.search_service.search(
            query,
            page=page,
            per_page=per_page,
            favorites_user_id=favorites_of,
            category_filter=category
        )
    except SearchUnavailableError as e:
        raise click.ClickException(f"Search unavailable: {e}")

    if as_json:
        echo_json(response.to_dict())
        return

    pagination = response.pagination
    click.echo(f"{pagination.total} result(s), page {pagination.page}/{pagination.total_pages}")
    for item in response.items:
        categories = ', '.join(c['name'] for c in item.categories)
        click.echo(f"  #{item.id} {item.name}" + (f"  [{categories}]" if categories else ""))

    meta = response.search_meta or {}
    if meta.get('translated_query'):
        click.echo(f"Translated: {meta['original_query']} -> {meta['translated_query']}")
    if meta.get('synonyms_used'):
        click.echo(f"Also searching for: {', '.join(meta['synonyms_used'])}")
    for term, suggestion in meta.get('did_you_mean', {}).items():
        click.echo(f"Did you mean '{suggestion}' instead of '{term}'?")
    if meta.get('suggested_category'):
        click.echo(f"Try browsing category: {meta['suggested_category']}")
