"""
Offer / advertisement generation endpoints.

POST /api/generate-offer
  { "goal", "discountType", "productOrService", "category",
    "startDate", "endDate", "customMessage"?, "tone"? }
  -> { "success": true, "description": str }

POST /api/generate-ad
  { "title", "description", "targetPage", "imageDescription"?, "hasUploadedImage"? }
  -> { "success": true, "adText": str, "imagePrompt": str }

ValidationError is mapped to 400 by the app error handler.
"""

from __future__ import annotations
import logging

from flask import Blueprint, jsonify

from routes import get_container, json_body
from service.ad_generator import AdRequest
from service.offer_prompt import OfferRequest

logger = logging.getLogger("Offers")

bp = Blueprint("offers", __name__, url_prefix="/api")


@bp.post("/generate-offer")
def generate_offer():
    c = get_container()
    data = json_body()
    req = OfferRequest.from_payload(data, max_len=c.settings.MAX_FIELD_LEN)
    description = c.offers.generate(req, tone=data.get("tone"))
    logger.info("offer generated category=%s chars=%d", req.category, len(description))
    return jsonify({"success": True, "description": description})


@bp.post("/generate-ad")
def generate_ad():
    c = get_container()
    req = AdRequest.from_payload(json_body(), max_len=c.settings.MAX_FIELD_LEN)
    result = c.ads.generate(req)
    logger.info("ad generated target=%s chars=%d", req.target_page, len(result.ad_text))
    return jsonify({"success": True, **result.to_dict()})
