"""
Container: builds and holds the per-process singletons.

Provides:
- CompletionClient (connectors/openai_client.py)
- OfferGenerator / AdGenerator (service/*)
- RateLimiter shared by the middleware
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Optional

from app.config import Settings
from connectors.openai_client import CompletionClient
from service import CompletionLike
from service.ad_generator import AdGenerator
from service.offer_generator import OfferGenerator
from service.rate_limit import RateLimiter


@dataclass
class Container:
    settings: Settings
    # Tests inject a stub here; default is the real OpenAI connector
    completions: Optional[CompletionLike] = None

    def __post_init__(self):
        if self.completions is None:
            self.completions = CompletionClient.from_settings(self.settings)

        self.offers = OfferGenerator(self.completions, self.settings)
        self.ads = AdGenerator(self.completions, self.settings, enhancer=self.offers)
        self.limiter = RateLimiter.per_minute(self.settings.RATE_LIMIT_PER_MIN, self.settings.RATE_LIMIT_BURST)
