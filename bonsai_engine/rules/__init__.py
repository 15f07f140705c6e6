"""Public rules API."""

from .api import BonsaiGame

__all__ = ["BonsaiGame"]
