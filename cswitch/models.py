from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


CONFIG_VERSION = "1.0"
CONFIG_DIR = ".cswitch"
CONFIG_FILE = "config.json"


def utc_timestamp() -> str:
    """ISO 8601 timestamp in UTC with millisecond precision, e.g. 2024-05-01T12:00:00.000Z"""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


class Token(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    alias: str
    value: str = Field(repr=False)
    created_at: str = Field(alias="createdAt")


class Provider(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    base_url: str = Field(alias="baseUrl")
    display_name: Optional[str] = Field(default=None, alias="displayName")
    created_at: str = Field(alias="createdAt")
    tokens: List[Token] = Field(default_factory=list)
    anthropic_model: Optional[str] = Field(default=None, alias="anthropicModel")
    anthropic_small_fast_model: Optional[str] = Field(default=None, alias="anthropicSmallFastModel")

    @property
    def name(self) -> str:
        return self.display_name or self.base_url


class LastUsed(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    provider_url: str = Field(alias="providerUrl")
    token_alias: str = Field(alias="tokenAlias")


class Config(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    version: str = CONFIG_VERSION
    last_used: Optional[LastUsed] = Field(default=None, alias="lastUsed")
    providers: List[Provider] = Field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """On-disk shape: camelCase keys, unset optionals omitted, lastUsed always present."""
        return {
            "version": self.version,
            "lastUsed": self.last_used.model_dump(by_alias=True) if self.last_used else None,
            "providers": [
                provider.model_dump(mode="json", by_alias=True, exclude_none=True)
                for provider in self.providers
            ],
        }
