# -*- coding: utf-8 -*-
"""Orquestração de uma consulta: busca por texto ou navegação por departamento."""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol

from .config import STAFFPICKS_CHANNEL, ScopeSettings
from .errors import VimeoScopeError
from .vimeo_api import ApiClient, VideoList

LOGGER = logging.getLogger("vimeo_scope.query")

AGGREGATED_PREFIX = "aggregated:"
CATEGORY_ID = "vimeo"
LOGIN_NAG_CATEGORY_ID = "vimeo_login_nag"


@dataclass(frozen=True)
class CannedQuery:
    query_string: str = ""
    department_id: str = ""


@dataclass
class Department:
    id: str
    label: str
    subdepartments: List["Department"] = field(default_factory=list)

    def add_subdepartment(self, dept: "Department"):
        self.subdepartments.append(dept)


@dataclass(frozen=True)
class Category:
    id: str
    title: str = ""


@dataclass
class CategorisedResult:
    category: Category
    fields: Dict[str, Any] = field(default_factory=dict)

    def __getitem__(self, key: str) -> Any:
        return self.fields[key]

    def __setitem__(self, key: str, value: Any):
        self.fields[key] = value


class SearchReply(Protocol):
    def register_departments(self, dept: Department) -> None:
        ...

    def register_category(self, id: str, title: str) -> Category:
        ...

    def push(self, result: CategorisedResult) -> bool:
        ...


@dataclass(frozen=True)
class QueryOutcome:
    pushed: int
    completed: bool
    error: Optional[VimeoScopeError] = None


class Query:
    def __init__(self, client: ApiClient, query: CannedQuery):
        self._client = client
        self._query = query

    @property
    def query(self) -> CannedQuery:
        return self._query

    def cancelled(self):
        self._client.cancel()

    def run(self, reply: SearchReply) -> QueryOutcome:
        """Executa a consulta; erros de domínio encerram e voltam no resultado.

        O que já foi registrado/enviado ao `reply` permanece.
        """
        pushed = 0
        try:
            videos = self._select_videos(reply)
            cat = reply.register_category(CATEGORY_ID, "")
            for video in videos:
                res = CategorisedResult(cat)
                res["uri"] = video.uri
                res["title"] = video.name
                res["art"] = video.picture
                res["description"] = video.description
                res["username"] = video.username
                if not reply.push(res):
                    return QueryOutcome(pushed, completed=False)
                pushed += 1
        except VimeoScopeError as exc:
            return QueryOutcome(pushed, completed=False, error=exc)
        return QueryOutcome(pushed, completed=True)

    def _select_videos(self, reply: SearchReply) -> VideoList:
        query_string = self._query.query_string.strip()
        if query_string:
            return self._client.videos(query_string).result()

        department_id = self._query.department_id
        all_depts = Department("", "My Feed")
        for channel in self._client.channels().result():
            all_depts.add_subdepartment(Department(channel.id, channel.name))

        authenticated = self._client.authenticated()
        include_login_nag = not authenticated

        if department_id.startswith(AGGREGATED_PREFIX):
            # departamento fantasma exigido pela validação da camada de apresentação
            all_depts.add_subdepartment(Department(department_id, " "))
            include_login_nag = False
            videos = self._client.channels_videos(STAFFPICKS_CHANNEL).result()
        elif department_id:
            videos = self._client.channels_videos(department_id).result()
        elif authenticated:
            videos = self._client.feed().result()
        else:
            videos = self._client.channels_videos(STAFFPICKS_CHANNEL).result()

        reply.register_departments(all_depts)

        if include_login_nag:
            self._add_login_nag(reply)
        return videos

    def _add_login_nag(self, reply: SearchReply):
        if ScopeSettings().ignore_accounts is not None:
            return
        cat = reply.register_category(LOGIN_NAG_CATEGORY_ID, "")
        res = CategorisedResult(cat)
        res["title"] = "Log-in to Vimeo"
        res["online_account_login"] = True
        LOGGER.debug("pushing login nag")
        reply.push(res)
