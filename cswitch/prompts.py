"""Interactive prompts.

Everything is written to stderr: when run through the shell function the
standard output is captured and evaluated, so it must carry nothing but
the export block.
"""

import logging
from typing import Callable, List, Optional, Sequence, Tuple, TypeVar

import click

from .errors import ValidationError
from .models import Config, Provider, Token
from .utils import format_provider_choice, format_token_choice
from .validation import (
    validate_alias,
    validate_base_url,
    validate_display_name,
    validate_provider_unique,
    validate_token_alias_unique,
    validate_token_value,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _validated(*validators: Callable[[str], None], required: bool = True) -> Callable[[str], str]:
    """Build a click ``value_proc`` that trims input and re-prompts on ValidationError."""

    def convert(value: str) -> str:
        value = value.strip()
        if not value and not required:
            return value
        try:
            for validator in validators:
                validator(value)
        except ValidationError as e:
            raise click.BadParameter(str(e))
        return value

    return convert


def select_prompt(message: str, choices: Sequence[Tuple[str, T]]) -> Optional[T]:
    """Numbered selection menu; 0 cancels and returns None."""
    if not choices:
        return None

    click.echo(message, err=True)
    for index, (title, _) in enumerate(choices, start=1):
        click.echo(f"  {index}) {title}", err=True)
    click.echo("  0) Cancel", err=True)

    selected = click.prompt("Choice", type=click.IntRange(0, len(choices)), default=1, err=True)
    if selected == 0:
        logger.debug("User cancelled prompt: %s", message)
        return None
    return choices[selected - 1][1]


def text_prompt(message: str, default: Optional[str] = None,
                value_proc: Optional[Callable[[str], str]] = None, hide_input: bool = False) -> str:
    return click.prompt(message, default=default, value_proc=value_proc, hide_input=hide_input,
                        show_default=bool(default), err=True)


def optional_prompt(message: str, current: Optional[str] = None,
                    value_proc: Optional[Callable[[str], str]] = None) -> Optional[str]:
    """Blank input means unset; a current value is shown but is not the default."""
    if current:
        message = f"{message} [current: {current}, leave blank to remove]"
    value = click.prompt(message, default="", value_proc=value_proc, show_default=False, err=True)
    return value.strip() or None


def confirm_prompt(message: str, default: bool = False) -> bool:
    return click.confirm(message, default=default, err=True)


def show_main_menu(config: Config) -> Optional[str]:
    choices: List[Tuple[str, str]] = []
    if config.providers:
        choices.append(("Switch configuration", "switch"))
    choices.append(("Add provider", "add-provider"))
    if config.providers:
        choices.append(("Add token", "add-token"))
    choices.append(("Manage configurations", "manage"))

    return select_prompt("What would you like to do?", choices)


def show_manage_menu() -> Optional[str]:
    return select_prompt("What would you like to do?", [
        ("List configurations", "list"),
        ("Edit provider or token", "edit"),
        ("Delete provider or token", "delete"),
    ])


def select_provider(config: Config, message: str = "Select a provider:") -> Optional[Provider]:
    active_url = config.last_used.provider_url if config.last_used else None
    return select_prompt(message, [
        (f"{format_provider_choice(p, p.base_url == active_url)} - {len(p.tokens)} token(s)", p)
        for p in config.providers
    ])


def select_token(provider: Provider, message: str = "Select a token:",
                 active_alias: Optional[str] = None) -> Optional[Token]:
    return select_prompt(message, [
        (format_token_choice(t, t.alias == active_alias), t) for t in provider.tokens
    ])


def select_configuration(config: Config) -> Optional[Tuple[Provider, Token]]:
    """Provider then token selection for a switch."""
    provider = select_provider(config)
    if provider is None:
        return None

    active_alias = None
    if config.last_used and config.last_used.provider_url == provider.base_url:
        active_alias = config.last_used.token_alias

    token = select_token(provider, active_alias=active_alias)
    if token is None:
        return None
    return provider, token


def prompt_provider_url(config: Config, default: Optional[str] = None,
                        exclude_base_url: Optional[str] = None) -> str:
    return text_prompt(
        "Enter provider base URL",
        default=default,
        value_proc=_validated(
            validate_base_url,
            lambda value: validate_provider_unique(config, value, exclude_base_url),
        ),
    )


def prompt_display_name(current: Optional[str] = None) -> Optional[str]:
    return optional_prompt("Enter display name (optional)", current=current,
                           value_proc=_validated(validate_display_name, required=False))


def prompt_token_alias(provider: Optional[Provider] = None, default: Optional[str] = None,
                       exclude_alias: Optional[str] = None) -> str:
    validators = [validate_alias]
    if provider is not None:
        validators.append(lambda value: validate_token_alias_unique(provider, value, exclude_alias))
    return text_prompt("Enter token alias (e.g., work-account)", default=default,
                       value_proc=_validated(*validators))


def prompt_token_value() -> str:
    return text_prompt("Enter auth token (hidden)", hide_input=True,
                       value_proc=_validated(validate_token_value))


def prompt_models(provider: Optional[Provider] = None) -> Tuple[Optional[str], Optional[str]]:
    model = optional_prompt("ANTHROPIC_MODEL (optional)",
                            current=provider.anthropic_model if provider else None)
    small_fast_model = optional_prompt("ANTHROPIC_SMALL_FAST_MODEL (optional)",
                                       current=provider.anthropic_small_fast_model if provider else None)
    return model, small_fast_model


def get_new_provider_input(config: Config) -> dict:
    base_url = prompt_provider_url(config)
    display_name = prompt_display_name()
    token_alias = prompt_token_alias(default="default")
    token_value = prompt_token_value()
    anthropic_model, anthropic_small_fast_model = prompt_models()

    return {
        "base_url": base_url,
        "display_name": display_name,
        "token_alias": token_alias,
        "token_value": token_value,
        "anthropic_model": anthropic_model,
        "anthropic_small_fast_model": anthropic_small_fast_model,
    }


def get_new_token_input(provider: Provider) -> Tuple[str, str]:
    alias = prompt_token_alias(provider)
    value = prompt_token_value()
    return alias, value


def confirm_deletion(item_name: str) -> bool:
    return confirm_prompt(f'Delete "{item_name}"? This cannot be undone.', default=False)
