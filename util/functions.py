# util/functions.py
import time
from typing import Iterable, List
from uuid import uuid4

HTTP_SCHEMES = ("http://", "https://")


def new_id() -> str:
    return str(uuid4())


def now_ms() -> int:
    return int(time.time() * 1000)


def is_http_url(value: object) -> bool:
    return isinstance(value, str) and value.startswith(HTTP_SCHEMES)


def ordered_unique(items: Iterable[str]) -> List[str]:
    """Drop duplicates, keeping first-seen order."""
    return list(dict.fromkeys(items))
