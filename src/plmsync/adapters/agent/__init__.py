"""Dependency-extraction agent adapter (request and callback decoding)."""

from __future__ import annotations

from .client import DependencyAgentClient
from .translator import dependency_delivery

__all__ = ["DependencyAgentClient", "dependency_delivery"]
