import logging
import os
import subprocess
import sys
from typing import Optional

import click

from . import __version__
from . import prompts
from . import store
from .config import ConfigManager
from .env import build_launch_env
from .errors import ConfigError, CswitchError
from .models import Config
from .shell_integration import ShellIntegration
from .switch import auto_load, switch_configuration
from .utils import error_message, format_config_summary, format_provider_list, success_message, warning_message

logger = logging.getLogger(__name__)


def setup_logging() -> None:
    """CSWITCH_DEBUG=1 turns on debug output; logs always go to stderr."""
    package_logger = logging.getLogger("cswitch")
    if package_logger.handlers:
        return

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("[%(asctime)s] [%(levelname)s] %(message)s"))
    package_logger.addHandler(handler)
    package_logger.setLevel(logging.DEBUG if os.environ.get("CSWITCH_DEBUG") == "1" else logging.WARNING)
    package_logger.propagate = False


def _fail(message: str, code: int = 1) -> None:
    click.echo(error_message(message, sys.stderr), err=True)
    sys.exit(code)


@click.group(invoke_without_command=True, context_settings={"help_option_names": ["--help", "-h"]})
@click.option('--silent', is_flag=True, help='Suppress the success message (used by the shell hook)')
@click.option('--auto-load', 'auto_load_flag', is_flag=True, help='Output exports for the last-used configuration')
@click.option('--list', 'list_flag', is_flag=True, help='List all providers and tokens')
@click.version_option(version=__version__, prog_name="cswitch")
@click.pass_context
def cli(ctx: click.Context, silent: bool, auto_load_flag: bool, list_flag: bool):
    """cswitch - Manage multiple Claude API provider configurations

    \b
    Run without arguments to open the interactive menu.
    Configuration is stored in ~/.cswitch/config.json

    \b
    Examples:
      cswitch               Show main menu
      cswitch init          Set up shell integration
      cswitch --list        List all providers and tokens
      cswitch claude -c     Launch claude with the last-selected provider
    """
    if ctx.invoked_subcommand is not None:
        return

    try:
        config_manager = ConfigManager()

        if auto_load_flag:
            _auto_load_impl(config_manager)
            return

        config = config_manager.load_or_initialize()

        if list_flag:
            _list_impl(config)
            return

        _main_menu_impl(config, config_manager, silent)
    except CswitchError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    except click.exceptions.Abort:
        raise
    except Exception as e:
        click.echo(f"Unexpected error: {e}", err=True)
        sys.exit(1)


def _auto_load_impl(config_manager: ConfigManager) -> None:
    # read() rather than load_or_initialize(): auto-load never writes
    config = config_manager.read()
    output = auto_load(config)
    if output:
        click.echo(output)


def _list_impl(config: Config) -> None:
    last_used = config.last_used
    click.echo("")
    click.echo(format_config_summary(
        len(config.providers),
        sum(len(p.tokens) for p in config.providers),
        last_used.provider_url if last_used else None,
        last_used.token_alias if last_used else None,
    ))
    click.echo("")
    click.echo(format_provider_list(
        config.providers,
        last_used.provider_url if last_used else None,
        last_used.token_alias if last_used else None,
    ))


def _main_menu_impl(config: Config, config_manager: ConfigManager, silent: bool) -> None:
    action = prompts.show_main_menu(config)

    if action == 'switch':
        _switch_impl(config, config_manager, silent)
    elif action == 'add-provider':
        _add_provider_impl(config, config_manager)
    elif action == 'add-token':
        _add_token_impl(config, config_manager)
    elif action == 'manage':
        _manage_impl(config, config_manager)
    else:
        logger.debug("User cancelled main menu")


def _switch_impl(config: Config, config_manager: ConfigManager, silent: bool) -> None:
    selected = prompts.select_configuration(config)
    if selected is None:
        logger.debug("Switch cancelled by user")
        return

    provider, token = selected
    click.echo(switch_configuration(config, provider, token, config_manager, silent=silent))


def _add_provider_impl(config: Config, config_manager: ConfigManager) -> None:
    data = prompts.get_new_provider_input(config)
    provider = store.add_provider(config, **data)
    config_manager.write(config)

    click.echo(success_message(f"Added provider: {provider.name}"))
    click.echo(success_message(f"Added token: {provider.tokens[0].alias}"))


def _add_token_impl(config: Config, config_manager: ConfigManager) -> None:
    provider = prompts.select_provider(config, "Select provider to add token to:")
    if provider is None:
        return

    alias, value = prompts.get_new_token_input(provider)
    store.add_token(provider, alias, value)
    config_manager.write(config)

    click.echo(success_message(f'Added token "{alias}" to {provider.name}'))


def _manage_impl(config: Config, config_manager: ConfigManager) -> None:
    action = prompts.show_manage_menu()

    if action == 'list':
        _list_impl(config)
    elif action == 'edit':
        _edit_impl(config, config_manager)
    elif action == 'delete':
        _delete_impl(config, config_manager)


def _edit_impl(config: Config, config_manager: ConfigManager) -> None:
    if not config.providers:
        click.echo("ℹ No providers configured")
        return

    provider = prompts.select_provider(config, "Select provider to manage:")
    if provider is None:
        return

    edit_type = prompts.select_prompt("What would you like to edit?", [
        ("Edit provider base URL", "provider-url"),
        ("Edit provider name", "provider-name"),
        ("Edit provider models", "provider-models"),
        ("Edit token alias", "token-alias"),
        ("Edit token value", "token-value"),
    ])
    if edit_type is None:
        return

    if edit_type == 'provider-url':
        new_url = prompts.prompt_provider_url(config, default=provider.base_url,
                                              exclude_base_url=provider.base_url)
        store.edit_provider_url(config, provider, new_url)
    elif edit_type == 'provider-name':
        store.edit_provider_name(provider, prompts.prompt_display_name(current=provider.display_name))
    elif edit_type == 'provider-models':
        model, small_fast_model = prompts.prompt_models(provider)
        store.edit_provider_models(provider, model, small_fast_model)
    elif edit_type == 'token-alias':
        token = prompts.select_token(provider, "Select token to rename:")
        if token is None:
            return
        new_alias = prompts.prompt_token_alias(provider, default=token.alias, exclude_alias=token.alias)
        store.edit_token_alias(config, provider, token.alias, new_alias)
    elif edit_type == 'token-value':
        token = prompts.select_token(provider, "Select token to update:")
        if token is None:
            return
        store.edit_token_value(provider, token.alias, prompts.prompt_token_value())

    config_manager.write(config)
    click.echo(success_message("Configuration updated"))


def _delete_impl(config: Config, config_manager: ConfigManager) -> None:
    if not config.providers:
        click.echo("ℹ No providers configured")
        return

    provider = prompts.select_provider(config, "Select provider to manage:")
    if provider is None:
        return

    delete_type = prompts.select_prompt("What would you like to delete?", [
        ("Delete entire provider", "provider"),
        ("Delete specific token", "token"),
    ])
    if delete_type is None:
        return

    had_last_used = config.last_used is not None

    if delete_type == 'provider':
        if not prompts.confirm_deletion(provider.name):
            click.echo("Deletion cancelled")
            return
        store.delete_provider(config, provider)
    else:
        if len(provider.tokens) <= 1:
            _fail("Cannot delete the last token. Delete the provider instead.")
        token = prompts.select_token(provider, "Select token to delete:")
        if token is None:
            return
        if not prompts.confirm_deletion(token.alias):
            click.echo("Deletion cancelled")
            return
        store.delete_token(config, provider, token.alias)

    config_manager.write(config)
    if had_last_used and config.last_used is None:
        click.echo(warning_message("Cleared last-used configuration"))
    click.echo(success_message("Configuration deleted"))


@cli.command()
def init():
    """Install shell integration (one-time setup)"""
    try:
        ConfigManager().load_or_initialize()

        integration = ShellIntegration()
        profile_path = integration.get_shell_config_path()
        if profile_path is None:
            click.echo(error_message("Could not detect shell profile", sys.stderr), err=True)
            click.echo("  Supported shells: zsh, bash", err=True)
            sys.exit(1)

        integration.install(profile_path)
        click.echo(success_message(f"Shell integration added to: {profile_path}"))
        click.echo(success_message(f"Restart your terminal or run: source {profile_path}"))
    except CswitchError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    except (OSError, RuntimeError) as e:
        _fail(f"Failed to initialize shell integration: {e}")


@cli.command(hidden=True)
def uninstall():
    """Remove shell integration"""
    try:
        integration = ShellIntegration()
        if integration.uninstall():
            click.echo(success_message("Shell integration removed"))
        else:
            click.echo("cswitch shell integration is not installed")
    except (OSError, RuntimeError) as e:
        _fail(f"Failed to remove shell integration: {e}")


@cli.command(context_settings={"ignore_unknown_options": True, "allow_interspersed_args": False},
             add_help_option=False)
@click.argument('claude_args', nargs=-1, type=click.UNPROCESSED)
def claude(claude_args: tuple):
    """Launch claude with the last-selected provider"""
    try:
        config = ConfigManager().load_or_initialize()
    except CswitchError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    if config.last_used is None:
        _fail('No provider selected. Run "cswitch" first to choose a provider.')

    resolved = store.resolve_last_used(config)
    if resolved is None:
        _fail('Selected provider/token not found. Run "cswitch" to choose a provider.')

    provider, token = resolved
    env = build_launch_env(provider, token)
    logger.debug("Launching claude with provider: %s (token %s)", provider.base_url, token.alias)

    try:
        result = subprocess.run(['claude', *claude_args], env=env, check=False)
    except FileNotFoundError:
        _fail("Failed to launch claude: command not found. Ensure it is in PATH.", 127)
    except PermissionError:
        _fail("Failed to launch claude: permission denied", 126)

    if result.returncode != 0:
        logger.debug("Claude exited with code: %s", result.returncode)
    sys.exit(result.returncode)


def main(argv: Optional[list] = None):
    """主入口点"""
    setup_logging()
    try:
        cli(args=argv)
    except KeyboardInterrupt:
        click.echo("\nOperation cancelled by user", err=True)
        sys.exit(1)


if __name__ == '__main__':
    main()
