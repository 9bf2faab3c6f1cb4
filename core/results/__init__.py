"""Result sink interface."""

from .base import IResultHandler

__all__ = ["IResultHandler"]
