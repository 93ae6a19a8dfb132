"""Validation of providers, tokens and whole configurations.

Every check raises :class:`~cswitch.errors.ValidationError` naming the
offending field; nothing here touches the filesystem.
"""

from datetime import datetime
from typing import Any, Optional, Sequence
from urllib.parse import urlparse

from pydantic import ValidationError as PydanticValidationError

from .errors import ValidationError
from .models import CONFIG_VERSION, Config, LastUsed, Provider, Token

MAX_ALIAS_LENGTH = 50
MAX_DISPLAY_NAME_LENGTH = 100
MIN_TOKEN_VALUE_LENGTH = 10


def validate_url(url: str) -> bool:
    """Whether ``url`` is an absolute http or https URL."""
    if not url:
        return False

    try:
        parsed = urlparse(url)
        parsed.port
    except ValueError:
        return False

    if parsed.scheme not in ("http", "https"):
        return False
    if not parsed.hostname or any(ch.isspace() for ch in parsed.netloc):
        return False
    return True


def is_valid_timestamp(value: Optional[str]) -> bool:
    if not value or not isinstance(value, str):
        return False
    try:
        datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return False
    return True


def validate_alias(alias: str) -> None:
    if not alias or not alias.strip():
        raise ValidationError("Token alias cannot be empty", "alias")
    if len(alias.strip()) > MAX_ALIAS_LENGTH:
        raise ValidationError(f"Token alias must be {MAX_ALIAS_LENGTH} characters or less", "alias")


def validate_token_value(value: str) -> None:
    if not value or not value.strip():
        raise ValidationError("Token value cannot be empty", "value")
    if len(value.strip()) < MIN_TOKEN_VALUE_LENGTH:
        raise ValidationError(f"Token value must be at least {MIN_TOKEN_VALUE_LENGTH} characters", "value")


def validate_base_url(base_url: str) -> None:
    if not base_url or not base_url.strip():
        raise ValidationError("Provider base URL cannot be empty", "baseUrl")
    if not validate_url(base_url):
        raise ValidationError("Provider base URL must be a valid HTTP or HTTPS URL", "baseUrl")


def validate_display_name(display_name: Optional[str]) -> None:
    if display_name and len(display_name) > MAX_DISPLAY_NAME_LENGTH:
        raise ValidationError(
            f"Provider display name must be {MAX_DISPLAY_NAME_LENGTH} characters or less",
            "displayName",
        )


def validate_token_alias_unique(provider: Provider, alias: str, exclude_alias: Optional[str] = None) -> None:
    """Reject ``alias`` if another token of ``provider`` already uses it.

    ``exclude_alias`` is the token's own current alias during a rename.
    """
    existing = [t.alias for t in provider.tokens if t.alias != exclude_alias]
    if alias in existing:
        raise ValidationError(
            f'Token alias "{alias}" already exists in provider "{provider.base_url}"', "alias"
        )


def validate_provider_unique(config: Config, base_url: str, exclude_base_url: Optional[str] = None) -> None:
    """Reject ``base_url`` if another provider already uses it (exact match)."""
    existing = [p.base_url for p in config.providers if p.base_url != exclude_base_url]
    if base_url in existing:
        raise ValidationError(f'Provider with base URL "{base_url}" already exists', "baseUrl")


def validate_provider_has_tokens(provider: Provider) -> None:
    if not provider.tokens:
        raise ValidationError("Provider must have at least one token", "tokens")


def validate_token(token: Token) -> None:
    validate_alias(token.alias)
    validate_token_value(token.value)
    if not is_valid_timestamp(token.created_at):
        raise ValidationError("Token createdAt must be a valid ISO 8601 timestamp", "createdAt")


def validate_provider(provider: Provider) -> None:
    validate_base_url(provider.base_url)
    validate_display_name(provider.display_name)
    validate_provider_has_tokens(provider)

    if not is_valid_timestamp(provider.created_at):
        raise ValidationError("Provider createdAt must be a valid ISO 8601 timestamp", "createdAt")

    for token in provider.tokens:
        validate_token(token)

    aliases = [t.alias for t in provider.tokens]
    if len(aliases) != len(set(aliases)):
        raise ValidationError("Token aliases must be unique within a provider", "tokens")


def validate_last_used(config: Config, last_used: LastUsed) -> None:
    provider = next((p for p in config.providers if p.base_url == last_used.provider_url), None)
    if provider is None:
        raise ValidationError(
            f"LastUsed references non-existent provider: {last_used.provider_url}",
            "lastUsed.providerUrl",
        )

    if not any(t.alias == last_used.token_alias for t in provider.tokens):
        raise ValidationError(
            f"LastUsed references non-existent token: {last_used.token_alias}",
            "lastUsed.tokenAlias",
        )


def _check_version(version: Any) -> None:
    if version != CONFIG_VERSION:
        raise ValidationError(
            f"Unsupported config version: {version}. Expected: {CONFIG_VERSION}", "version"
        )


def validate_config(config: Config) -> None:
    _check_version(config.version)

    if not isinstance(config.providers, list):
        raise ValidationError("Config must have a providers array", "providers")

    for provider in config.providers:
        validate_provider(provider)

    base_urls = [p.base_url for p in config.providers]
    if len(base_urls) != len(set(base_urls)):
        raise ValidationError("Provider base URLs must be unique", "providers")

    if config.last_used is not None:
        validate_last_used(config, config.last_used)


def _field_from_loc(loc: Sequence[Any]) -> str:
    for part in reversed(loc):
        if isinstance(part, str):
            return part
    return "config"


def parse_config(raw: Any) -> Config:
    """Build a validated :class:`Config` from a decoded JSON document."""
    if not isinstance(raw, dict):
        raise ValidationError("Config must be a JSON object", "config")

    _check_version(raw.get("version"))

    if not isinstance(raw.get("providers"), list):
        raise ValidationError("Config must have a providers array", "providers")

    try:
        config = Config.model_validate(raw)
    except PydanticValidationError as e:
        error = e.errors()[0]
        location = ".".join(str(part) for part in error["loc"])
        raise ValidationError(f"Invalid value at {location}: {error['msg']}", _field_from_loc(error["loc"])) from e

    validate_config(config)
    return config
