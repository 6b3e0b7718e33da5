"""`branchflow config` commands."""

import sys

import click
from rich.table import Table

from ..ui.prompts import Prompter
from ..utils.config import (
    CONFIG_KEYS, CONFIG_KEY_DESCRIPTIONS, ConfigManager, mask_secret, parse_bool
)
from ..utils.errors import ConfigurationError
from ..utils.logger import Logger, console


def _manager(ctx) -> ConfigManager:
    return ctx.obj['config']


def _prompter(ctx) -> Prompter:
    return ctx.obj['prompter']


def _check_key(key: str):
    if key not in CONFIG_KEYS:
        Logger.error(f"Invalid config key: {key}")
        Logger.info(f"Valid keys: {', '.join(CONFIG_KEYS)}")
        sys.exit(1)


def show_config(manager: ConfigManager):
    """Print every key with secrets masked."""
    settings = manager.list_config()
    explicit = settings.model_fields_set

    table = Table(show_header=True, header_style="bold", title="Configuration")
    table.add_column("Key")
    table.add_column("Value")
    table.add_column("Description", style="dim")

    for key in CONFIG_KEYS:
        value = getattr(settings, key)
        if key == "linearEnabled":
            shown = "true" if value else "false"
            if key not in explicit:
                shown += " (default)"
        elif value:
            shown = mask_secret(value)
        else:
            shown = "(not set)"
        table.add_row(key, shown, CONFIG_KEY_DESCRIPTIONS[key])

    console.print(table)
    Logger.print(f"Source: {manager.get_config_path()}", style="dim")

    missing = manager.missing_required_keys()
    if missing:
        Logger.warn(f"Missing required keys: {', '.join(missing)}. Run: branchflow config init")


def _save(manager: ConfigManager, patch: dict):
    try:
        path = manager.set_config_values(patch)
    except ConfigurationError as e:
        Logger.error(str(e))
        sys.exit(1)
    Logger.debug(f"Saved configuration to {path}")


@click.group()
def config():
    """Manage API keys and integration settings."""
    pass


@config.command('get')
@click.argument('key')
@click.pass_context
def config_get(ctx, key):
    """Print one configuration value."""
    _check_key(key)
    value = _manager(ctx).get_config_value(key)
    if value is None or value == "":
        Logger.warn(f'Config key "{key}" is not set')
        sys.exit(1)
    if isinstance(value, bool):
        value = "true" if value else "false"
    click.echo(value)


@config.command('set')
@click.argument('key')
@click.argument('value')
@click.pass_context
def config_set(ctx, key, value):
    """Store a configuration value in the global config file."""
    _check_key(key)
    _save(_manager(ctx), {key: parse_bool(value) if key == "linearEnabled" else value})
    Logger.success(f"Set {key} successfully")


@config.command('list')
@click.pass_context
def config_list(ctx):
    """Show all configuration values."""
    show_config(_manager(ctx))


@config.command('init')
@click.pass_context
def config_init(ctx):
    """Interactive setup wizard."""
    prompter = _prompter(ctx)
    Logger.start("Setting up branchflow configuration...")

    google_key = prompter.text("Google AI API key (required)", password=True)
    if not google_key:
        Logger.error("Google AI API key is required!")
        sys.exit(1)

    github_token = prompter.text("GitHub token (required)", password=True)
    if not github_token:
        Logger.error("GitHub token is required!")
        sys.exit(1)

    patch = {"googleAiKey": google_key, "githubToken": github_token}
    patch["linearEnabled"] = prompter.confirm("Enable Linear integration?", default=True)
    if patch["linearEnabled"]:
        linear_key = prompter.text("Linear API key (optional)", default="", password=True)
        if linear_key:
            patch["linearApiKey"] = linear_key

    _save(_manager(ctx), patch)
    Logger.success("Configuration saved successfully")
    show_config(_manager(ctx))


@config.command('edit')
@click.pass_context
def config_edit(ctx):
    """Change a single configuration value interactively."""
    manager = _manager(ctx)
    prompter = _prompter(ctx)

    selected = prompter.select(
        "What would you like to configure?",
        [
            ("googleAiKey", "Google AI API Key"),
            ("githubToken", "GitHub Token"),
            ("linearApiKey", "Linear API Key"),
            ("linearEnabled", "Enable/Disable Linear Integration"),
            ("back", "Back"),
        ]
    )
    if selected == "back":
        return

    current = manager.get_config_value(selected)
    if selected == "linearEnabled":
        enabled = prompter.confirm(
            f"Linear integration is currently {'enabled' if current else 'disabled'}. "
            "Enable Linear integration?",
            default=not current
        )
        _save(manager, {"linearEnabled": enabled})
        Logger.success(f"Linear integration {'enabled' if enabled else 'disabled'}")
    else:
        question = f"New value for {selected}"
        if current:
            question += f" (current: {mask_secret(current)})"
        value = prompter.text(question, default="", password=True)
        if not value:
            Logger.warn("No value provided. Configuration not changed.")
            return
        _save(manager, {selected: value})
        Logger.success(f"Updated {selected} successfully")

    show_config(manager)
