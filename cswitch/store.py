"""In-memory mutation operations on a loaded :class:`Config`.

None of these functions touch the disk. Callers persist the result with
``ConfigManager.write``, which re-validates the whole configuration, and
simply skip the write when an operation raises or the user cancels.
"""

import logging
from typing import Optional, Tuple

from .errors import OperationError
from .models import Config, LastUsed, Provider, Token, utc_timestamp
from .utils import normalize_model_field
from .validation import (
    validate_alias,
    validate_base_url,
    validate_display_name,
    validate_provider_unique,
    validate_token_alias_unique,
    validate_token_value,
)

logger = logging.getLogger(__name__)


def _normalize_display_name(display_name: Optional[str]) -> Optional[str]:
    if display_name is None:
        return None
    return display_name.strip() or None


def find_provider(config: Config, base_url: str) -> Optional[Provider]:
    return next((p for p in config.providers if p.base_url == base_url), None)


def find_token(provider: Provider, alias: str) -> Optional[Token]:
    return next((t for t in provider.tokens if t.alias == alias), None)


def resolve_last_used(config: Config) -> Optional[Tuple[Provider, Token]]:
    """Return the provider/token pair ``lastUsed`` points at, if both still exist."""
    if config.last_used is None:
        return None

    provider = find_provider(config, config.last_used.provider_url)
    if provider is None:
        return None

    token = find_token(provider, config.last_used.token_alias)
    if token is None:
        return None

    return provider, token


def add_provider(config: Config, base_url: str, token_alias: str, token_value: str,
                 display_name: Optional[str] = None, anthropic_model: Optional[str] = None,
                 anthropic_small_fast_model: Optional[str] = None) -> Provider:
    """Append a new provider holding exactly one token."""
    validate_base_url(base_url)
    validate_provider_unique(config, base_url)
    display_name = _normalize_display_name(display_name)
    validate_display_name(display_name)
    validate_alias(token_alias)
    validate_token_value(token_value)

    now = utc_timestamp()
    provider = Provider(
        base_url=base_url,
        display_name=display_name,
        created_at=now,
        tokens=[Token(alias=token_alias, value=token_value, created_at=now)],
        anthropic_model=normalize_model_field(anthropic_model),
        anthropic_small_fast_model=normalize_model_field(anthropic_small_fast_model),
    )
    config.providers.append(provider)
    logger.debug("Provider added: %s", base_url)
    return provider


def add_token(provider: Provider, alias: str, value: str) -> Token:
    validate_alias(alias)
    validate_token_alias_unique(provider, alias)
    validate_token_value(value)

    token = Token(alias=alias, value=value, created_at=utc_timestamp())
    provider.tokens.append(token)
    logger.debug("Token %s added to provider: %s", alias, provider.base_url)
    return token


def edit_provider_url(config: Config, provider: Provider, new_url: str) -> None:
    """Change a provider's base URL; ``lastUsed`` follows the rename."""
    validate_base_url(new_url)
    validate_provider_unique(config, new_url, exclude_base_url=provider.base_url)

    old_url = provider.base_url
    provider.base_url = new_url
    if config.last_used is not None and config.last_used.provider_url == old_url:
        config.last_used.provider_url = new_url
    logger.debug("Provider URL updated: %s -> %s", old_url, new_url)


def edit_provider_name(provider: Provider, display_name: Optional[str]) -> None:
    """Set the display name; blank removes it."""
    display_name = _normalize_display_name(display_name)
    validate_display_name(display_name)
    provider.display_name = display_name
    logger.debug("Provider name updated to: %s", display_name or "(removed)")


def edit_provider_models(provider: Provider, anthropic_model: Optional[str],
                         anthropic_small_fast_model: Optional[str]) -> None:
    provider.anthropic_model = normalize_model_field(anthropic_model)
    provider.anthropic_small_fast_model = normalize_model_field(anthropic_small_fast_model)
    logger.debug("Provider models updated for: %s", provider.base_url)


def edit_token_alias(config: Config, provider: Provider, alias: str, new_alias: str) -> Optional[Token]:
    """Rename a token; returns None if ``alias`` does not exist."""
    token = find_token(provider, alias)
    if token is None:
        return None

    validate_alias(new_alias)
    validate_token_alias_unique(provider, new_alias, exclude_alias=token.alias)

    token.alias = new_alias
    last_used = config.last_used
    if last_used is not None and last_used.provider_url == provider.base_url and last_used.token_alias == alias:
        last_used.token_alias = new_alias
    logger.debug("Token alias updated: %s -> %s", alias, new_alias)
    return token


def edit_token_value(provider: Provider, alias: str, new_value: str) -> Optional[Token]:
    token = find_token(provider, alias)
    if token is None:
        return None

    validate_token_value(new_value)
    token.value = new_value
    logger.debug("Token value updated for: %s", alias)
    return token


def delete_provider(config: Config, provider: Provider) -> None:
    """Remove a provider and all its tokens, clearing ``lastUsed`` if it pointed here."""
    if config.last_used is not None and config.last_used.provider_url == provider.base_url:
        config.last_used = None
        logger.debug("Cleared last-used configuration")

    config.providers = [p for p in config.providers if p is not provider]
    logger.debug("Provider deleted: %s", provider.base_url)


def delete_token(config: Config, provider: Provider, alias: str) -> Optional[Token]:
    """Remove one token from a provider.

    A provider always keeps at least one token, so deleting the last one is
    refused with :class:`OperationError`. Returns the removed token, or None
    if no token has that alias.
    """
    if not provider.tokens:
        raise OperationError("No tokens to delete")
    if len(provider.tokens) == 1:
        raise OperationError("Cannot delete the last token. Delete the provider instead.")

    token = find_token(provider, alias)
    if token is None:
        return None

    last_used = config.last_used
    if last_used is not None and last_used.provider_url == provider.base_url and last_used.token_alias == alias:
        config.last_used = None
        logger.debug("Cleared last-used configuration")

    provider.tokens.remove(token)
    logger.debug("Token deleted: %s", alias)
    return token


def set_last_used(config: Config, provider_url: str, token_alias: str) -> None:
    config.last_used = LastUsed(provider_url=provider_url, token_alias=token_alias)
