"""Routers module - FastAPI route handlers"""

from . import analyze, config, diff

__all__ = ["analyze", "config", "diff"]
