"""
Connectors package exports.

- CompletionClient: OpenAI chat-completions adapter
- CompletionError: raised for any failed or empty completion

These are thin adapters; degradation policy lives in service/*.
"""

from .openai_client import CompletionClient, CompletionError

__all__ = ["CompletionClient", "CompletionError"]
