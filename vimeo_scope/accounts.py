# -*- coding: utf-8 -*-
"""Provedor externo de tokens de conta (contrato mínimo)."""

from dataclasses import dataclass
from typing import List, Protocol, Sequence

from .config import ScopeSettings


@dataclass(frozen=True)
class ServiceStatus:
    service_authenticated: bool
    access_token: str = ""
    client_id: str = ""
    client_secret: str = ""


class AccountClient(Protocol):
    def get_service_statuses(self) -> Sequence[ServiceStatus]:
        ...


class EnvAccountClient:
    """Credenciais lidas de VIMEO_SCOPE_ACCESS_TOKEN / CLIENT_ID / CLIENT_SECRET.

    Relê o ambiente a cada chamada, então o refresh é feito no lugar.
    """

    def get_service_statuses(self) -> List[ServiceStatus]:
        s = ScopeSettings()
        token = s.access_token or ""
        client_id = s.client_id or ""
        client_secret = s.client_secret or ""
        authenticated = bool(token) or bool(client_id and client_secret)
        return [ServiceStatus(authenticated, token, client_id, client_secret)]
