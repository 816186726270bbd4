"""Constantes de configuração padrão do scope do Vimeo."""

from dataclasses import dataclass
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

VIMEO_API_URL = "https://api.vimeo.com"
DEFAULT_ACCEPT = "application/vnd.vimeo.*+json; version=3.2"
DEFAULT_USER_AGENT = "vimeo-scope/0.1"
STAFFPICKS_CHANNEL = "staffpicks"
CHANNELS_PAGE_SIZE = 10
CHUNK_SIZE = 16 * 1024          # bytes lidos por checkpoint de progresso
ENV_PREFIX = "VIMEO_SCOPE_"


class ScopeSettings(BaseSettings):
    """Overrides via ambiente (VIMEO_SCOPE_*), relidos a cada refresh."""

    model_config = SettingsConfigDict(env_prefix=ENV_PREFIX, extra="ignore")

    apiroot: Optional[str] = None
    # basta a variável existir (mesmo vazia) para ignorar as contas
    ignore_accounts: Optional[str] = None
    access_token: Optional[str] = None
    client_id: Optional[str] = None
    client_secret: Optional[str] = None
    timeout_secs: Optional[float] = None
    log_level: str = "INFO"


@dataclass(frozen=True)
class Config:
    apiroot: str = VIMEO_API_URL
    access_token: str = ""
    client_id: str = ""
    client_secret: str = ""
    accept: str = DEFAULT_ACCEPT
    user_agent: str = DEFAULT_USER_AGENT
    authenticated: bool = False
