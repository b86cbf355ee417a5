"""Search analytics CLI commands."""

import click

from .common import echo_json, load_engine


def _print_terms(terms, as_json: bool) -> None:
    if as_json:
        echo_json([t.to_dict() for t in terms])
        return
    if not terms:
        click.echo("No searches recorded in this window")
        return
    for term in terms:
        click.echo(f"  {term.search_count:>6}  {term.term}  "
                   f"avg={term.avg_results:.1f} zero={term.zero_result_count}")


@click.group()
def analytics():
    """Inspect and maintain search analytics."""
    pass


@analytics.command()
@click.option('--days', default=7, type=int, help='Window in days')
@click.option('--limit', '-n', default=20, type=int, help='Number of queries to show')
@click.option('--json', 'as_json', is_flag=True)
@click.pass_context
def popular(ctx: click.Context, days: int, limit: int, as_json: bool):
    """Most searched queries."""
    _print_terms(load_engine(ctx).analytics.get_popular_searches(days=days, limit=limit), as_json)


@analytics.command('zero-results')
@click.option('--days', default=7, type=int, help='Window in days')
@click.option('--limit', '-n', default=20, type=int, help='Number of queries to show')
@click.option('--json', 'as_json', is_flag=True)
@click.pass_context
def zero_results(ctx: click.Context, days: int, limit: int, as_json: bool):
    """Queries that repeatedly returned nothing."""
    _print_terms(load_engine(ctx).analytics.get_zero_result_searches(days=days, limit=limit), as_json)


@analytics.command()
@click.option('--retention-days', default=None, type=int, help='Keep this many days')
@click.pass_context
def cleanup(ctx: click.Context, retention_days):
    """Delete analytics older than the retention window."""
    engine = load_engine(ctx)
    retention_days = retention_days or engine.config.analytics_retention_days
    deleted = engine.analytics.cleanup_old_data(retention_days)
    click.echo(f"✓ Removed {deleted} row(s) older than {retention_days} days")
