"""
Service package exports & protocol types.

Exposes:
- protocol types for DI hints (CompletionLike)
"""

from __future__ import annotations
from typing import Optional, Protocol


class CompletionLike(Protocol):
    def complete(
        self,
        system: str,
        user: str,
        *,
        model: Optional[str] = None,
        temperature: float = 0.5,
        max_tokens: int = 200,
    ) -> str: ...
