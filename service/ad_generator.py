"""
Advertisement generator.

Produces a one-line Farsi ad text plus an English image-generation prompt.

Reply contract (asked for in build_ad_prompt):
    <ad text>
    <blank line>
    <image description>

Leading labels the model tends to add ("متن آگهی:", "۱.", "۲-" ...) are
stripped; only Persian numerals count as labels, so "1-day" survives.
If the ad text comes back empty or without any Arabic-script
character, the normalized original description is used instead.
"""

from __future__ import annotations
import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Tuple

from connectors.openai_client import CompletionError
from service import CompletionLike
from service.offer_generator import OfferGenerator
from service.offer_prompt import build_ad_prompt
from service.text_normalizer import normalize_rtl_text, tidy_text
from service.validators import DEFAULT_MAX_LEN, MISSING_FIELDS, ValidationError, sanitize_text, validate_json

logger = logging.getLogger("Ads")

IMAGE_STYLE_SUFFIX = (
    " - high quality - vibrant colors - clean design - minimalist style"
    " - professional photography - commercial use - business advertisement"
    " - no religious elements - no cultural symbols - focus on main subject"
)

_AD_LABEL = re.compile(r"^\s*(?:متن\s*آگهی\s*:|آگهی\s*:|۱\s*[.\-]|۱\s+)\s*")
_IMAGE_LABEL = re.compile(r"^\s*(?:توضیحات\s*تصویر\s*:|تصویر\s*:|۲\s*[.\-]|۲\s+)\s*")
_ARABIC_SCRIPT = re.compile(r"[\u0600-\u06ff]")
_PARTS = re.compile(r"\n\s*\n")

_TEXT = {"type": "string", "pattern": r"\S"}

# generate-ad body; imageDescription is required only without an upload
AD_SCHEMA: Dict[str, Any] = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "type": "object",
    "required": ["title", "description", "targetPage"],
    "properties": {
        "title": _TEXT,
        "description": _TEXT,
        "targetPage": _TEXT,
        "imageDescription": {"type": ["string", "null"]},
        "hasUploadedImage": {"type": ["boolean", "string", "null"]},
    },
}


def _truthy(v: Any) -> bool:
    if isinstance(v, str):
        return v.strip().lower() in {"1", "true", "yes", "on"}
    return bool(v)


@dataclass(frozen=True)
class AdRequest:
    title: str
    description: str
    target_page: str
    image_description: str = ""
    has_uploaded_image: bool = False

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any], *, max_len: int = DEFAULT_MAX_LEN) -> "AdRequest":
        validate_json(payload, schema=AD_SCHEMA)
        has_image = _truthy(payload.get("hasUploadedImage"))
        image_description = sanitize_text(payload.get("imageDescription"), max_len=max_len)
        if not has_image and not image_description:
            raise ValidationError(
                "imageDescription is required without an uploaded image", ["imageDescription"], code=MISSING_FIELDS
            )
        return cls(
            title=sanitize_text(payload["title"], max_len=max_len),
            description=sanitize_text(payload["description"], max_len=max_len),
            target_page=sanitize_text(payload["targetPage"], max_len=max_len),
            image_description=image_description,
            has_uploaded_image=has_image,
        )


@dataclass(frozen=True)
class AdResult:
    ad_text: str
    image_prompt: str

    def to_dict(self) -> dict:
        return {"adText": self.ad_text, "imagePrompt": self.image_prompt}


def split_reply(reply: str) -> Tuple[str, str]:
    parts = [p.strip() for p in _PARTS.split(reply or "", maxsplit=1)]
    ad = _AD_LABEL.sub("", parts[0]) if parts else ""
    image = _IMAGE_LABEL.sub("", parts[1]) if len(parts) > 1 else ""
    return ad.strip(), image.strip()


def image_prompt_for(description: str) -> str:
    return f"Modern professional {tidy_text(description)}{IMAGE_STYLE_SUFFIX}"


@dataclass
class AdGenerator:
    client: CompletionLike
    settings: Any
    enhancer: Optional[OfferGenerator] = None

    def __post_init__(self):
        if self.enhancer is None:
            self.enhancer = OfferGenerator(self.client, self.settings)

    def _enhance(self, text: str) -> str:
        if not text or not self.settings.FF_ENHANCE_INPUTS:
            return text
        return self.enhancer.enhance_input(text, style="ad")

    def generate(self, request: AdRequest) -> AdResult:
        title = self._enhance(request.title)
        description = self._enhance(request.description)
        image_description = "" if request.has_uploaded_image else self._enhance(request.image_description)

        prompt = build_ad_prompt(title, description, request.target_page, image_description)
        try:
            reply = self.client.complete(
                prompt.system,
                prompt.user,
                model=self.settings.OPENAI_MODEL,
                temperature=self.settings.AD_TEMPERATURE,
                max_tokens=self.settings.AD_MAX_TOKENS,
            )
        except CompletionError as e:
            logger.warning("ad generation degraded to original description: %s", e)
            reply = ""

        ad_part, image_part = split_reply(reply)
        ad_text = normalize_rtl_text(ad_part)
        if not ad_text or not _ARABIC_SCRIPT.search(ad_text):
            ad_text = normalize_rtl_text(request.description)

        image_source = image_part or image_description or request.image_description or request.title
        return AdResult(ad_text=ad_text, image_prompt=image_prompt_for(image_source))
