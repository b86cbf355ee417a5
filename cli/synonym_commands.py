"""Synonym management CLI commands."""

from typing import Optional

import click

from search.exceptions import SynonymValidationError
from storage.seed_synonyms import seed_synonyms
from .common import echo_json, load_engine


@click.group()
def synonyms():
    """Manage the synonym vocabulary."""
    pass


@synonyms.command('list')
@click.option('--search', 'search_text', default=None, help='Filter by substring of either term')
@click.option('--page', default=1, type=int, help='Page number')
@click.option('--per-page', default=50, type=int, help='Entries per page')
@click.option('--json', 'as_json', is_flag=True, help='Print entries as JSON')
@click.pass_context
def list_synonyms(ctx: click.Context, search_text: Optional[str], page: int,
                  per_page: int, as_json: bool):
    """List synonym entries."""
    entries, total = load_engine(ctx).synonym_admin.list(page, per_page, search_text)

    if as_json:
        echo_json({'total': total, 'entries': [e.to_dict() for e in entries]})
        return

    click.echo(f"{total} synonym(s)")
    for entry in entries:
        status = "" if entry.active else "  (inactive)"
        hint = f" [{entry.category_hint}]" if entry.category_hint else ""
        click.echo(f"  {entry.id:>5}  {entry.synonym} -> {entry.canonical}  "
                   f"w={entry.weight:.2f} {entry.language}{hint} used={entry.usage_count}{status}")


@synonyms.command()
@click.argument('canonical')
@click.argument('synonym')
@click.option('--weight', default=1.0, type=float, help='Expansion weight in (0, 1]')
@click.option('--language', type=click.Choice(['en', 'fr']), default='en')
@click.option('--category-hint', default=None, help='Category this synonym is specific to')
@click.pass_context
def add(ctx: click.Context, canonical: str, synonym: str, weight: float,
        language: str, category_hint: Optional[str]):
    """Add (or refresh) a synonym."""
    try:
        entry = load_engine(ctx).synonym_admin.create(
            canonical, synonym, weight=weight, language=language, category_hint=category_hint
        )
    except SynonymValidationError as e:
        raise click.ClickException(str(e))
    click.echo(f"✓ Saved '{entry.synonym}' -> '{entry.canonical}' (id {entry.id})")


@synonyms.command()
@click.argument('synonym_id', type=int)
@click.option('--canonical', default=None)
@click.option('--synonym', default=None)
@click.option('--weight', default=None, type=float)
@click.option('--language', type=click.Choice(['en', 'fr']), default=None)
@click.option('--category-hint', default=None)
@click.option('--active/--inactive', default=None)
@click.pass_context
def update(ctx: click.Context, synonym_id: int, **fields):
    """Update fields of a synonym entry."""
    changes = {name: value for name, value in fields.items() if value is not None}
    if not changes:
        raise click.UsageError("Nothing to update")
    try:
        updated = load_engine(ctx).synonym_admin.update(synonym_id, **changes)
    except SynonymValidationError as e:
        raise click.ClickException(str(e))
    if not updated:
        raise click.ClickException(f"Synonym {synonym_id} not found")
    click.echo(f"✓ Updated synonym {synonym_id}")


@synonyms.command()
@click.argument('synonym_id', type=int)
@click.pass_context
def deactivate(ctx: click.Context, synonym_id: int):
    """Stop a synonym from expanding queries."""
    if not load_engine(ctx).synonym_admin.deactivate(synonym_id):
        raise click.ClickException(f"Synonym {synonym_id} not found")
    click.echo(f"✓ Deactivated synonym {synonym_id}")


@synonyms.command()
@click.argument('synonym_id', type=int)
@click.option('--force', '-f', is_flag=True, help='Skip confirmation')
@click.pass_context
def delete(ctx: click.Context, synonym_id: int, force: bool):
    """Permanently delete a synonym."""
    if not force:
        click.confirm(f"Delete synonym {synonym_id}?", abort=True)
    if not load_engine(ctx).synonym_admin.delete(synonym_id):
        raise click.ClickException(f"Synonym {synonym_id} not found")
    click.echo(f"✓ Deleted synonym {synonym_id}")


@synonyms.command()
@click.pass_context
def seed(ctx: click.Context):
    """Load the built-in furniture vocabulary."""
    engine = load_engine(ctx)
    result = seed_synonyms(engine.synonym_store)
    engine.synonym_index.invalidate()
    engine.fuzzy_matcher.clear_cache()
    click.echo(f"✓ Seeded {result['created']} synonym(s), {result['skipped']} already present")
