"""Shared helpers for CLI commands."""

import os
import json
from typing import Any

import click

from config.config_storage import ConfigStorage
from config.config_validator import ConfigValidator
from engine import SearchEngine, build_engine


def load_engine(ctx: click.Context) -> SearchEngine:
    """Build the engine on first use and close it when the command finishes."""
    obj = ctx.ensure_object(dict)
    if 'engine' not in obj:
        project_root = obj.get('project_root', '.')
        config = ConfigStorage(project_root).load_effective_config()
        if obj.get('db_path'):
            config.db_path = obj['db_path']
        elif not os.path.isabs(config.db_path):
            config.db_path = os.path.join(project_root, config.db_path)
        if obj.get('locale'):
            config.locale = obj['locale']

        is_valid, errors = ConfigValidator().validate_config(config)
        if not is_valid:
            raise click.ClickException("Invalid configuration: " + "; ".join(errors))

        engine = build_engine(config)
        obj['engine'] = engine
        ctx.call_on_close(engine.close)
    return obj['engine']


def echo_json(data: Any) -> None:
    click.echo(json.dumps(data, indent=2, default=str, ensure_ascii=False))
