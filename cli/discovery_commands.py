"""Synonym auto-discovery CLI commands."""

from typing import Optional

import click

from .common import echo_json, load_engine


@click.group()
def discovery():
    """Mine search analytics for new synonyms."""
    pass


@discovery.command()
@click.option('--days', default=None, type=int, help='Lookback window in days')
@click.option('--json', 'as_json', is_flag=True)
@click.pass_context
def analyze(ctx: click.Context, days: Optional[int], as_json: bool):
    """Show synonym suggestions without creating anything."""
    engine = load_engine(ctx)
    suggestions = engine.discovery().analyze(days or engine.config.auto_discovery_lookback_days)

    if as_json:
        echo_json([s.to_dict() for s in suggestions])
        return
    if not suggestions:
        click.echo("No suggestions")
        return
    for s in suggestions:
        detail = s.suggestion or s.related_term or ', '.join(m.term for m in s.matches)
        confidence = f" ({s.confidence:.2f})" if s.confidence is not None else ""
        click.echo(f"  [{s.type.value}] {s.term} -> {detail or '?'}{confidence}")


@discovery.command()
@click.option('--days', default=None, type=int, help='Lookback window in days')
@click.option('--min-confidence', default=None, type=float, help='Creation threshold')
@click.pass_context
def apply(ctx: click.Context, days: Optional[int], min_confidence: Optional[float]):
    """Create synonyms from suggestions above the confidence threshold."""
    from tasks import run_discovery

    result = run_discovery(load_engine(ctx), lookback_days=days, min_confidence=min_confidence)
    click.echo(f"✓ {result['suggestions']} suggestion(s): "
               f"{result['created']} created, {result['skipped']} skipped")
