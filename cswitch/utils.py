import sys
from datetime import datetime
from typing import List, Optional, TextIO

from .models import Provider, Token


def normalize_model_field(value: Optional[str]) -> Optional[str]:
    """规范化模型字段：空白值视为未设置"""
    if value is None:
        return None
    value = value.strip()
    return value or None


def mask_sensitive_value(value: str, visible_chars: int = 10, mask_char: str = "•") -> str:
    """遮盖敏感信息（保留前10个字符，最多遮盖10个字符）"""
    if len(value) <= visible_chars:
        return value
    return value[:visible_chars] + mask_char * min(len(value) - visible_chars, 10)


def format_date(timestamp: str) -> str:
    """将ISO时间戳格式化为日期"""
    try:
        return datetime.fromisoformat(timestamp.replace("Z", "+00:00")).strftime("%Y-%m-%d")
    except ValueError:
        return timestamp


COLORS = {
    "red": "\033[31m",
    "green": "\033[32m",
    "yellow": "\033[33m",
    "blue": "\033[34m",
    "cyan": "\033[36m",
    "gray": "\033[90m",
    "bold": "\033[1m",
    "reset": "\033[0m",
}


def colorize(text: str, color: str, stream: Optional[TextIO] = None) -> str:
    """为文本添加颜色（仅在支持的终端中）"""
    stream = stream or sys.stdout
    if not stream.isatty():
        return text

    if color.lower() in COLORS:
        return f"{COLORS[color.lower()]}{text}{COLORS['reset']}"

    return text


def success_message(text: str, stream: Optional[TextIO] = None) -> str:
    return colorize(f"✓ {text}", "green", stream)


def error_message(text: str, stream: Optional[TextIO] = None) -> str:
    return colorize(f"✗ {text}", "red", stream)


def warning_message(text: str, stream: Optional[TextIO] = None) -> str:
    return colorize(f"⚠ {text}", "yellow", stream)


def info_message(text: str, stream: Optional[TextIO] = None) -> str:
    return colorize(f"ℹ {text}", "blue", stream)


def format_provider_choice(provider: Provider, is_active: bool = False) -> str:
    active = colorize(" ✓ (active)", "green") if is_active else ""
    if provider.display_name:
        return f"{provider.display_name} ({provider.base_url}){active}"
    return f"{provider.base_url}{active}"


def format_token_choice(token: Token, is_active: bool = False) -> str:
    active = colorize(" ✓ (active)", "green") if is_active else ""
    return f"{token.alias} (created: {format_date(token.created_at)}){active}"


def format_provider_row(provider: Provider, is_active: bool = False) -> str:
    marker = colorize("✓", "green") if is_active else " "
    name = provider.display_name or colorize("(no name)", "gray")
    count = colorize(f"{len(provider.tokens)} token(s)", "yellow")
    return f"{marker} {colorize(name, 'bold')} - {colorize(provider.base_url, 'cyan')} - {count}"


def format_token_row(token: Token, is_active: bool = False) -> str:
    marker = colorize("✓", "green") if is_active else " "
    masked = colorize(mask_sensitive_value(token.value), "gray")
    created = colorize(format_date(token.created_at), "gray")
    return f"  {marker} {colorize(token.alias, 'bold')} - {masked} - {created}"


def format_provider_list(providers: List[Provider], active_provider_url: Optional[str] = None,
                         active_token_alias: Optional[str] = None) -> str:
    if not providers:
        return colorize("No providers configured.", "gray")

    lines = []
    for provider in providers:
        provider_active = provider.base_url == active_provider_url
        lines.append(format_provider_row(provider, provider_active))
        for token in provider.tokens:
            lines.append(format_token_row(token, provider_active and token.alias == active_token_alias))
        lines.append("")

    return "\n".join(lines)


def format_config_summary(provider_count: int, token_count: int, active_provider: Optional[str] = None,
                          active_token: Optional[str] = None) -> str:
    lines = [
        colorize("Configuration Summary", "bold"),
        f"Providers: {colorize(str(provider_count), 'yellow')}",
        f"Tokens: {colorize(str(token_count), 'yellow')}",
    ]

    if active_provider and active_token:
        lines.append(f"Active: {colorize(f'{active_provider} - {active_token}', 'green')}")
    else:
        lines.append(f"Active: {colorize('(none)', 'gray')}")

    return "\n".join(lines)
