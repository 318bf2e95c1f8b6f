"""
Text-generation connector (OpenAI chat completions).

Responsibilities:
- Single-shot completion: (system, user, temperature, max_tokens) -> text
- Lazy SDK client so the app boots (and tests run) without an API key
- Every failure surfaces as CompletionError; callers decide how to degrade

Env:
  OPENAI_API_KEY=sk-...
  OPENAI_TIMEOUT=30

Notes:
- No retries here. Offer/ad generators fall back to normalized input instead.
"""

from __future__ import annotations
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Optional

from openai import OpenAI, OpenAIError

logger = logging.getLogger("OpenAI")

DEFAULT_MODEL = "gpt-4"


class CompletionError(RuntimeError):
    pass


@dataclass
class CompletionClient:
    api_key: Optional[str] = None
    timeout: float = 30.0
    default_model: str = DEFAULT_MODEL
    _client: Any = field(default=None, repr=False)

    # ------------- factory -------------

    @classmethod
    def from_settings(cls, settings) -> "CompletionClient":
        return cls(
            api_key=settings.OPENAI_API_KEY,
            timeout=settings.OPENAI_TIMEOUT,
            default_model=settings.OPENAI_MODEL,
        )

    @property
    def client(self) -> OpenAI:
        if self._client is None:
            if not self.api_key:
                raise CompletionError("OPENAI_API_KEY is not configured")
            self._client = OpenAI(api_key=self.api_key.strip(), timeout=self.timeout)
        return self._client

    # ------------- public API -------------

    def complete(
        self,
        system: str,
        user: str,
        *,
        model: Optional[str] = None,
        temperature: float = 0.5,
        max_tokens: int = 200,
    ) -> str:
        """
        Returns the stripped text of the first choice.
        Raises CompletionError on SDK errors or an empty reply.
        """
        model = model or self.default_model
        t0 = time.time()
        try:
            completion = self.client.chat.completions.create(
                model=model,
                messages=[
                    {"role": "system", "content": system},
                    {"role": "user", "content": user},
                ],
                temperature=temperature,
                max_tokens=max_tokens,
            )
        except OpenAIError as e:
            raise CompletionError(f"{model} completion failed: {e}") from e

        choices = getattr(completion, "choices", None) or []
        content = (choices[0].message.content or "").strip() if choices else ""
        logger.info("completion model=%s ms=%d chars=%d", model, int((time.time() - t0) * 1000), len(content))
        if not content:
            raise CompletionError(f"{model} returned an empty completion")
        return content
