# -*- coding: utf-8 -*-
import json
import time
from typing import Any, Dict, List, Optional, TextIO

from .query import CategorisedResult, Category, Department


def utc_iso_now() -> str:
    return time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime())


class NDJSONReply:
    """SearchReply que escreve um resultado por linha; `limit` aplica backpressure."""

    def __init__(self, out: TextIO, limit: Optional[int] = None):
        self.out = out
        self.limit = limit
        self.departments: Optional[Department] = None
        self.categories: List[Category] = []
        self.count = 0

    def register_departments(self, dept: Department):
        self.departments = dept

    def register_category(self, id: str, title: str) -> Category:
        cat = Category(id, title)
        self.categories.append(cat)
        return cat

    def push(self, result: CategorisedResult) -> bool:
        if self.limit is not None and self.count >= self.limit:
            return False
        obj: Dict[str, Any] = {
            "category": result.category.id,
            "fetched_ts": utc_iso_now(),
            **result.fields,
        }
        self.out.write(json.dumps(obj, ensure_ascii=False) + "\n")
        self.count += 1
        return True
