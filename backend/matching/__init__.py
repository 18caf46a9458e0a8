# backend/matching/__init__.py
# 매칭 모듈

from .engine import MatchEngine, parse_amount_hint, DEFAULT_WINDOW
from .api import router

__all__ = [
    "MatchEngine",
    "parse_amount_hint",
    "DEFAULT_WINDOW",
    "router"
]
