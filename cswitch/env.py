"""Shell export contract.

The text produced here is evaluated by the ``cswitch`` shell function, so
line order and quoting are part of the interface::

    export ANTHROPIC_BASE_URL="<url>"
    export ANTHROPIC_AUTH_TOKEN="<token>"
    [export ANTHROPIC_MODEL="<model>"]
    [export ANTHROPIC_SMALL_FAST_MODEL="<small-fast-model>"]
    [echo "✓ Switched to <name> - <alias>"]

Values are interpolated verbatim between double quotes without escaping.
"""

import logging
import os
from typing import Dict, List, Mapping, Optional

from .models import Provider, Token

logger = logging.getLogger(__name__)

BASE_URL_VAR = "ANTHROPIC_BASE_URL"
AUTH_TOKEN_VAR = "ANTHROPIC_AUTH_TOKEN"
MODEL_VAR = "ANTHROPIC_MODEL"
SMALL_FAST_MODEL_VAR = "ANTHROPIC_SMALL_FAST_MODEL"


def generate_export_commands(base_url: str, token: str, anthropic_model: Optional[str] = None,
                             anthropic_small_fast_model: Optional[str] = None) -> List[str]:
    logger.debug("Generating export commands for: %s", base_url)

    commands = [
        f'export {BASE_URL_VAR}="{base_url}"',
        f'export {AUTH_TOKEN_VAR}="{token}"',
    ]

    if anthropic_model and anthropic_model.strip():
        commands.append(f'export {MODEL_VAR}="{anthropic_model}"')

    if anthropic_small_fast_model and anthropic_small_fast_model.strip():
        commands.append(f'export {SMALL_FAST_MODEL_VAR}="{anthropic_small_fast_model}"')

    return commands


def generate_success_message(provider_name: str, token_alias: str) -> str:
    return f'echo "✓ Switched to {provider_name} - {token_alias}"'


def generate_shell_output(base_url: str, token: str, provider_name: str, token_alias: str,
                          silent: bool = False, anthropic_model: Optional[str] = None,
                          anthropic_small_fast_model: Optional[str] = None) -> str:
    """Export block plus, unless ``silent``, the acknowledgment echo."""
    lines = generate_export_commands(base_url, token, anthropic_model, anthropic_small_fast_model)
    if not silent:
        lines.append(generate_success_message(provider_name, token_alias))
    return "\n".join(lines)


def generate_provider_output(provider: Provider, token: Token, silent: bool = False) -> str:
    return generate_shell_output(
        provider.base_url,
        token.value,
        provider.name,
        token.alias,
        silent=silent,
        anthropic_model=provider.anthropic_model,
        anthropic_small_fast_model=provider.anthropic_small_fast_model,
    )


def build_launch_env(provider: Provider, token: Token,
                     base_env: Optional[Mapping[str, str]] = None) -> Dict[str, str]:
    """Environment for a child process: the current one plus base URL and auth token."""
    env = dict(os.environ if base_env is None else base_env)
    env[BASE_URL_VAR] = provider.base_url
    env[AUTH_TOKEN_VAR] = token.value
    return env
