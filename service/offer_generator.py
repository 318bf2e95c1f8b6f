"""
Offer generator.

Flow:
    OfferRequest -> enhance inputs (optional) -> build_offer_prompt
    -> completion call -> normalize_rtl_text(reply, discount_type)

Degradation:
- Enhancement failure: the original field is tidied and used as is.
- Offer call failure: a deterministic offer line built from the original
  request is normalized instead. generate() always returns a string.

The discount override always uses the caller's discount string, never the
enhanced one.
"""

from __future__ import annotations
import dataclasses
import logging
from dataclasses import dataclass
from typing import Any, Optional

from connectors.openai_client import CompletionError
from service import CompletionLike
from service.offer_prompt import (
    TYPE_LABELS,
    OfferRequest,
    build_enhance_prompt,
    build_offer_prompt,
    format_date,
    resolve_tone,
)
from service.text_normalizer import normalize_rtl_text, tidy_text

logger = logging.getLogger("Offers")


def fallback_offer(request: OfferRequest) -> str:
    """Plain offer line used when the completion service is unavailable."""
    label = TYPE_LABELS[request.category_type]
    line = (
        f"پیشنهاد ویژه {label} {request.product_or_service}: {request.discount_type}. "
        f"از {format_date(request.start_date)} تا {format_date(request.end_date)}."
    )
    if request.custom_message:
        line = f"{line} {request.custom_message}"
    return line


@dataclass
class OfferGenerator:
    client: CompletionLike
    settings: Any

    def enhance_input(self, text: str, *, style: str = "offer") -> str:
        if not text:
            return ""
        prompt = build_enhance_prompt(text, style)
        try:
            out = self.client.complete(
                prompt.system,
                prompt.user,
                model=self.settings.ENHANCE_MODEL,
                temperature=self.settings.ENHANCE_TEMPERATURE,
                max_tokens=self.settings.ENHANCE_MAX_TOKENS,
            )
        except CompletionError as e:
            logger.warning("enhance_input fell back to original text: %s", e)
            return tidy_text(text)
        return tidy_text(out.strip().strip('"«»').strip()) or tidy_text(text)

    def enhance_request(self, request: OfferRequest) -> OfferRequest:
        return dataclasses.replace(
            request,
            goal=self.enhance_input(request.goal),
            product_or_service=self.enhance_input(request.product_or_service),
            custom_message=self.enhance_input(request.custom_message) if request.custom_message else None,
        )

    def generate(self, request: OfferRequest, tone: Optional[str] = None) -> str:
        tone_key = resolve_tone(tone)
        request.validate()
        prompt_request = request
        if self.settings.FF_ENHANCE_INPUTS:
            prompt_request = self.enhance_request(request)
        prompt = build_offer_prompt(prompt_request, tone_key)

        try:
            reply = self.client.complete(
                prompt.system,
                prompt.user,
                model=self.settings.OPENAI_MODEL,
                temperature=self.settings.OFFER_TEMPERATURE,
                max_tokens=self.settings.OFFER_MAX_TOKENS,
            )
        except CompletionError as e:
            logger.warning("offer generation degraded to fallback text: %s", e)
            reply = ""
        if not (reply or "").strip():
            reply = fallback_offer(request)

        return normalize_rtl_text(reply, request.discount_type)
