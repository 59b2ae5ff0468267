from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field, SecretStr


class ProxySettings(BaseModel):
    enabled: bool = False
    url: str | None = None
    username: str | None = None
    password: SecretStr | None = None

    model_config = {"extra": "forbid"}


class ExchangeCredentials(BaseModel):
    access_key: SecretStr
    secret: SecretStr

    model_config = {"extra": "forbid"}


class ExchangeSettings(BaseModel):
    base_url: str = "https://api.upbit.com/v1"
    auth_scheme: Literal["jwt", "hmac"] = "jwt"
    credentials: ExchangeCredentials | None = None
    trading_fee: float = Field(default=0.0015, ge=0, lt=1)
    timeout_s: float = Field(default=10.0, gt=0)
    rate_limit_ms: int = Field(default=500, ge=0)

    model_config = {"extra": "forbid"}


class Settings(BaseModel):
    env: str = "dev"
    proxy: ProxySettings = Field(default_factory=ProxySettings)
    exchange: ExchangeSettings = Field(default_factory=ExchangeSettings)

    model_config = {"extra": "forbid"}

    def redacted(self) -> dict[str, Any]:
        data = self.model_dump(mode="json")
        creds = data.get("exchange", {}).get("credentials")
        if isinstance(creds, dict):
            if "access_key" in creds:
                creds["access_key"] = "***"
            if "secret" in creds:
                creds["secret"] = "***"
        proxy = data.get("proxy")
        if isinstance(proxy, dict) and proxy.get("password") is not None:
            proxy["password"] = "***"
        return data
