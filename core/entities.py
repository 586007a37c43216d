# core/entities.py
from dataclasses import dataclass
from typing import Optional


@dataclass
class OriginalPosition:
    source: Optional[str] = None
    line: Optional[int] = None  # 1-based
    column: Optional[int] = None  # 0-based
    name: Optional[str] = None
