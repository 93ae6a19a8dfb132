import logging
from typing import Optional

from .config import ConfigManager
from .env import generate_provider_output
from .models import Config, Provider, Token
from .store import find_provider, find_token, set_last_used

logger = logging.getLogger(__name__)


def switch_configuration(config: Config, provider: Provider, token: Token,
                         config_manager: ConfigManager, silent: bool = False) -> str:
    """Record the pair as last used, persist, then return the shell text to evaluate.

    The export text is only produced after the write succeeded; a failed write
    raises and nothing is emitted.
    """
    set_last_used(config, provider.base_url, token.alias)
    config_manager.write(config)
    logger.debug("Config updated with new lastUsed: %s - %s", provider.base_url, token.alias)

    return generate_provider_output(provider, token, silent=silent)


def auto_load(config: Config) -> Optional[str]:
    """Silent export text for the last-used pair, or None if there is nothing to load.

    A dangling ``lastUsed`` is cleared in memory only; it is not written back.
    """
    if config.last_used is None:
        logger.debug("No lastUsed configuration, skipping auto-load")
        return None

    provider = find_provider(config, config.last_used.provider_url)
    if provider is None:
        logger.debug("Provider not found, clearing lastUsed")
        config.last_used = None
        return None

    token = find_token(provider, config.last_used.token_alias)
    if token is None:
        logger.debug("Token not found, clearing lastUsed")
        config.last_used = None
        return None

    return generate_provider_output(provider, token, silent=True)
