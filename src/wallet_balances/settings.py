"""Settings module with unified configuration precedence: CLI > ENV > CONFIG FILE."""

from __future__ import annotations

import os
import tomllib
from enum import Enum
from pathlib import Path
from typing import Any

from dotenv import load_dotenv
from pydantic import (
    AliasChoices,
    Field,
    SecretStr,
    field_validator,
    model_validator,
)
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from .constants import (
    COINGECKO_API_URL,
    DEFAULT_ACCOUNTS,
    DEFAULT_ALLOWED_ORIGINS,
    JUPITER_PRICE_URL,
    SOLSCAN_PRO_API_URL,
    SOLSCAN_PUBLIC_API_URL,
)

load_dotenv()

SECRET_FIELDS = {"api_key", "coingecko_api_key"}

# Every spelling under which a secret could be supplied, lowercased
SECRET_KEYS = {
    "api_key",
    "wallet_balances_api_key",
    "solscan_api_key",
    "coingecko_api_key",
    "wallet_balances_coingecko_api_key",
}


class LedgerApi(str, Enum):
    """Which Solscan API generation to query for balances."""

    PUBLIC = "solscan_public"
    PRO = "solscan_pro"


class AuthScheme(str, Enum):
    """How the credential is attached to ledger requests."""

    TOKEN = "token"  # `token: <key>` header
    BEARER = "bearer"  # `Authorization: Bearer <key>` header


class BalanceSettings(BaseSettings):
    """Single source of truth for configuration. Values may come from:
    - CLI (init kwargs)
    - ENV / .env (prefixed with WALLET_BALANCES_)
    - Config file (TOML), lowest precedence

    The ledger credential is also read from the bare SOLSCAN_API_KEY variable.
    Do not read os.environ or files elsewhere in the codebase.
    """

    # --- accounts ---
    accounts: list[str] = Field(default_factory=lambda: list(DEFAULT_ACCOUNTS))

    # --- ledger upstream ---
    api_key: SecretStr | None = Field(
        default=None,
        validation_alias=AliasChoices("WALLET_BALANCES_API_KEY", "SOLSCAN_API_KEY"),
    )
    ledger_api: LedgerApi = LedgerApi.PUBLIC
    auth_scheme: AuthScheme = AuthScheme.TOKEN
    public_api_url: str = SOLSCAN_PUBLIC_API_URL
    pro_api_url: str = SOLSCAN_PRO_API_URL
    include_native: bool = True

    # --- price sources, tried in order ---
    price_sources: list[str] = Field(default_factory=lambda: ["jupiter", "coingecko"])
    jupiter_price_url: str = JUPITER_PRICE_URL
    coingecko_api_url: str = COINGECKO_API_URL
    coingecko_api_key: SecretStr | None = None

    # --- timeouts and retries ---
    request_timeout: float = Field(default=10.0, gt=0)
    account_timeout: float = Field(default=30.0, gt=0)
    max_tries: int = Field(default=2, ge=1)

    # --- http surface ---
    allowed_origins: list[str] = Field(
        default_factory=lambda: list(DEFAULT_ALLOWED_ORIGINS)
    )
    cache_max_age: int = Field(default=1800, ge=0)
    cache_stale_while_revalidate: int = Field(default=300, ge=0)
    host: str = "127.0.0.1"
    port: int = 8000

    # --- logging ---
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="WALLET_BALANCES_",
        env_file=".env",
        extra="ignore",  # ignore unknown keys in env/config file
        populate_by_name=True,
    )

    @field_validator("api_key", "coingecko_api_key", mode="before")
    @classmethod
    def wrap_secrets(cls, v: Any) -> SecretStr | None:
        """Wrap string secrets in SecretStr; blank values count as unset."""
        if v is None or isinstance(v, SecretStr):
            return v
        if isinstance(v, str) and not v.strip():
            return None
        return SecretStr(v)

    @field_validator("accounts")
    @classmethod
    def validate_accounts(cls, v: list[str]) -> list[str]:
        """Strip whitespace, drop blanks and require at least one account."""
        cleaned = [account.strip() for account in v if account and account.strip()]
        if not cleaned:
            raise ValueError("accounts must contain at least one address")
        return cleaned

    @field_validator("price_sources")
    @classmethod
    def validate_price_sources(cls, v: list[str]) -> list[str]:
        from .adapters.price_adapters import PRICE_ADAPTER_REGISTRY

        normalized = [name.lower() for name in v]
        unknown = [name for name in normalized if name not in PRICE_ADAPTER_REGISTRY]
        if unknown:
            raise ValueError(
                f"Unknown price source(s): {', '.join(unknown)}. "
                f"Available: {', '.join(PRICE_ADAPTER_REGISTRY)}"
            )
        return normalized

    @model_validator(mode="after")
    def validate_timeout_ordering(self) -> "BalanceSettings":
        """Validate that a single request cannot outlive its account budget."""
        if self.request_timeout > self.account_timeout:
            raise ValueError(
                f"request_timeout ({self.request_timeout}) "
                f"must not exceed account_timeout ({self.account_timeout})"
            )
        return self

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Custom config-file source with explicit precedence: CLI > ENV > FILE."""
        env_cfg = os.environ.get("WALLET_BALANCES_CONFIG")
        cfg_path = Path(env_cfg) if env_cfg else None

        class TomlConfigSource(PydanticBaseSettingsSource):
            def __init__(self, settings_cls: type[BaseSettings], path: Path | None):
                super().__init__(settings_cls)
                self._path = path

            def get_field_value(
                self, field: Any, field_name: str
            ) -> tuple[Any, str, bool]:
                return None, "", False

            def __call__(self) -> dict[str, Any]:
                if not self._path:
                    # Try default locations
                    local_config = Path("wallet-balances.toml")
                    user_config = (
                        Path.home() / ".config" / "wallet-balances" / "config.toml"
                    )
                    if local_config.exists():
                        self._path = local_config
                    elif user_config.exists():
                        self._path = user_config
                    else:
                        return {}

                if not self._path.exists():
                    return {}

                with self._path.open("rb") as f:
                    data = tomllib.load(f)  # supports top-level or [wallet_balances]
                body = data.get("wallet_balances", data)
                if not isinstance(body, dict):
                    return {}

                for key in body:
                    if key.lower() in SECRET_KEYS:
                        raise ValueError(
                            f"Security violation: '{key}' found in TOML config file. "
                            f"Secrets must only be provided via environment variables or CLI flags."
                        )

                return body

        return (
            init_settings,  # CLI (highest)
            env_settings,  # ENV
            dotenv_settings,  # .env
            TomlConfigSource(settings_cls, cfg_path),  # CONFIG (lowest)
            file_secret_settings,  # optional secrets dir
        )

    def as_safe_dict(self) -> dict[str, Any]:
        """Return the config as a dict with secrets redacted."""
        data = self.model_dump(mode="json")
        for key in SECRET_FIELDS:
            if getattr(self, key):
                data[key] = "***redacted***"
        return data

    @property
    def api_key_value(self) -> str | None:
        """Plain-text credential, or None when not configured."""
        if self.api_key is None:
            return None
        return self.api_key.get_secret_value()
