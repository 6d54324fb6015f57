import os

from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .core.chain_types import to_hex_chain_id


BASE_DIR = Path(__file__).resolve().parents[1]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=BASE_DIR / ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    def model_post_init(self, __context: Any) -> None:
        """Pick up the legacy registry variable when the primary one is unset."""

        super().model_post_init(__context)

        if not self.bridge_registry_url:
            fallback = os.getenv("BRIDGES_URL")
            if fallback:
                object.__setattr__(self, "bridge_registry_url", fallback)

    log_level: str = Field(default="INFO", description="Logging level")

    # Wallet / RPC
    wallet_rpc_url: str = Field(
        default="http://127.0.0.1:8545",
        description="JSON-RPC endpoint forwarding EIP-1193 wallet requests",
        validation_alias=AliasChoices("wallet_rpc_url", "wallet_url"),
    )
    rpc_urls: Dict[str, str] = Field(
        default_factory=dict,
        description="Read-only RPC endpoints keyed by hex chain id (e.g. {\"0x64\": \"https://...\"})",
    )
    request_timeout_seconds: int = Field(default=30, description="HTTP request timeout")
    receipt_poll_interval_seconds: float = Field(
        default=2.0,
        description="Delay between eth_getTransactionReceipt polls",
    )

    # Bridge registry feed
    bridge_registry_url: str = Field(
        default="",
        description="URL of the JSON bridge registry feed",
    )
    bridge_registry_path: Optional[Path] = Field(
        default=None,
        description="Local JSON file holding the bridge registry feed",
    )

    # Question creation
    question_template_id: int = Field(default=0, description="Reality.eth template id for new questions")
    question_language: str = Field(default="en", description="Language tag appended to question text")

    @field_validator("rpc_urls")
    @classmethod
    def _canonical_chain_keys(cls, value: Dict[str, str]) -> Dict[str, str]:
        return {to_hex_chain_id(key): url for key, url in value.items() if url}

    def rpc_url_for_chain(self, chain_id: str) -> Optional[str]:
        """Read-only endpoint for a chain id, if one is configured."""
        return self.rpc_urls.get(to_hex_chain_id(chain_id))


settings = Settings()
