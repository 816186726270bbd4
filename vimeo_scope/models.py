# -*- coding: utf-8 -*-
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class Video:
    id: str
    name: str
    description: str
    uri: str
    picture: str
    username: str

    @classmethod
    def from_json(cls, item: Dict[str, Any]) -> "Video":
        return cls(
            id=item.get("id", ""),
            name=item.get("name", ""),
            description=item.get("description", ""),
            uri=item.get("uri", ""),
            picture=item.get("picture", ""),
            username=item.get("username", ""),
        )


@dataclass(frozen=True)
class Channel:
    id: str
    name: str

    @classmethod
    def from_json(cls, item: Dict[str, Any]) -> "Channel":
        return cls(id=item.get("id", ""), name=item.get("name", ""))


def get_list(root: Any, factory: Callable[[Dict[str, Any]], T]) -> List[T]:
    """Extrai `data` de `{"data": [...]}` preservando a ordem da API."""
    if not isinstance(root, dict):
        return []
    data = root.get("data")
    if not isinstance(data, list):
        return []
    return [factory(it) for it in data if isinstance(it, dict)]
