import os

import pytest

from cswitch.config import ConfigManager
from cswitch.models import Config, LastUsed, Provider, Token

TIMESTAMP = "2024-05-01T12:00:00.000Z"


@pytest.fixture(autouse=True)
def restore_environ():
    """Keep global environment stable across CLI invocations."""
    original = os.environ.copy()
    try:
        yield
    finally:
        os.environ.clear()
        os.environ.update(original)


@pytest.fixture()
def temp_home(tmp_path, monkeypatch):
    """Point the home directory (and so ~/.cswitch) at a temp location."""
    from pathlib import Path

    home_dir = tmp_path / "home"
    home_dir.mkdir(parents=True, exist_ok=True)
    monkeypatch.setenv("HOME", str(home_dir))
    monkeypatch.setattr(Path, "home", lambda: home_dir)
    return home_dir


@pytest.fixture()
def config_manager(temp_home):
    return ConfigManager()


@pytest.fixture()
def sample_config():
    """Two providers; the first one is last used."""
    return Config(
        last_used=LastUsed(provider_url="https://api.provider-a.com", token_alias="work"),
        providers=[
            Provider(
                base_url="https://api.provider-a.com",
                display_name="Provider A",
                created_at=TIMESTAMP,
                tokens=[
                    Token(alias="work", value="sk-ant-work-0123456789", created_at=TIMESTAMP),
                    Token(alias="personal", value="sk-ant-personal-0123456789", created_at=TIMESTAMP),
                ],
                anthropic_model="claude-3-5-sonnet-20241022",
            ),
            Provider(
                base_url="https://api.provider-b.com",
                created_at=TIMESTAMP,
                tokens=[Token(alias="default", value="sk-ant-b-0123456789", created_at=TIMESTAMP)],
            ),
        ],
    )
