"""
cswitch - Claude API provider switcher

Keeps several API providers, each with one or more auth tokens, and emits
shell exports that activate the chosen provider/token pair.
"""

__version__ = "1.0.0"

from .config import ConfigManager
from .errors import ConfigError, CswitchError, OperationError, ValidationError
from .models import CONFIG_VERSION, Config, LastUsed, Provider, Token
from .env import generate_export_commands, generate_shell_output, generate_success_message
from .switch import auto_load, switch_configuration

__all__ = [
    "ConfigManager",
    "ConfigError",
    "CswitchError",
    "OperationError",
    "ValidationError",
    "CONFIG_VERSION",
    "Config",
    "LastUsed",
    "Provider",
    "Token",
    "generate_export_commands",
    "generate_shell_output",
    "generate_success_message",
    "auto_load",
    "switch_configuration",
]
