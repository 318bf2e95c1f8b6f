"""
OfferGenerator tests against the stub completion client.
Covers: normalized end-to-end output, input enhancement on/off,
degradation when the enhance or offer call fails, and tone handling.
"""

from __future__ import annotations
import pytest

from app.config import load_settings
from service.offer_generator import OfferGenerator, fallback_offer
from service.offer_prompt import TONES, OfferRequest
from service.text_normalizer import normalize_rtl_text
from service.validators import ValidationError

L = "\u2066"
P = "\u2069"
EXPECTED = f"تخفیف {L}20%{P} قهوه فقط تا {L}7{P} {L}June{P} {L}2024{P}"


@pytest.fixture()
def enhancing_settings(config_override):
    return load_settings(dict(config_override, FF_ENHANCE_INPUTS="1"))


@pytest.fixture()
def request_(offer_payload):
    return OfferRequest.from_payload(offer_payload)


def test_generate_normalizes_and_overrides_discount(fake, settings, request_):
    out = OfferGenerator(fake, settings).generate(request_)
    assert out == EXPECTED

    assert len(fake.calls) == 1
    call = fake.calls[0]
    assert call["model"] == settings.OPENAI_MODEL
    assert call["temperature"] == settings.OFFER_TEMPERATURE
    assert call["max_tokens"] == settings.OFFER_MAX_TOKENS
    assert "7 June 2024" in call["user"]


def test_output_is_already_normalized(fake, settings, request_):
    out = OfferGenerator(fake, settings).generate(request_)
    assert normalize_rtl_text(out, request_.discount_type) == out


def test_enhancement_runs_once_per_text_field(fake, enhancing_settings, request_):
    out = OfferGenerator(fake, enhancing_settings).generate(request_)
    assert out == EXPECTED

    # goal + productOrService; no custom message
    enhance_calls = fake.calls_for(enhancing_settings.ENHANCE_MODEL)
    assert len(enhance_calls) == 2
    assert all(c["temperature"] == enhancing_settings.ENHANCE_TEMPERATURE for c in enhance_calls)
    assert len(fake.calls_for(enhancing_settings.OPENAI_MODEL)) == 1


def test_enhancement_includes_custom_message(fake, enhancing_settings, offer_payload):
    offer_payload["customMessage"] = "ارسال رایگان"
    req = OfferRequest.from_payload(offer_payload)
    OfferGenerator(fake, enhancing_settings).generate(req)
    assert len(fake.calls_for(enhancing_settings.ENHANCE_MODEL)) == 3
    assert "ارسال رایگان" in fake.calls_for(enhancing_settings.OPENAI_MODEL)[0]["user"]


def test_enhance_failure_keeps_original_fields(make_fake, enhancing_settings, request_):
    fake = make_fake(reply="تخفیف ۵۰٪ قهوه\nفقط تا ۷ June 2024", fail_models=[enhancing_settings.ENHANCE_MODEL])
    out = OfferGenerator(fake, enhancing_settings).generate(request_)
    assert out == EXPECTED
    assert "«weekend sales»" in fake.calls_for(enhancing_settings.OPENAI_MODEL)[0]["user"]


def test_enhance_input_tidies_reply(make_fake, settings):
    gen = OfferGenerator(make_fake(), settings)
    assert gen.enhance_input("  قهوه   تازه ، داغ ") == "قهوه تازه، داغ"
    assert gen.enhance_input("") == ""


def test_offer_call_failure_uses_fallback_line(make_fake, settings, request_):
    fake = make_fake(fail_models=[settings.OPENAI_MODEL])
    out = OfferGenerator(fake, settings).generate(request_)

    assert f"{L}20%{P}" in out
    assert "coffee" in out
    assert f"{L}1{P} {L}June{P} {L}2024{P}" in out
    assert f"{L}7{P} {L}June{P} {L}2024{P}" in out
    assert normalize_rtl_text(out, "20% off") == out


def test_empty_reply_uses_fallback_line(make_fake, settings, request_):
    out = OfferGenerator(make_fake(reply="   "), settings).generate(request_)
    assert out == normalize_rtl_text(fallback_offer(request_), request_.discount_type)


def test_fallback_offer_mentions_category_label(request_):
    line = fallback_offer(request_)
    assert "خدمات" in line
    assert "1 June 2024" in line
    assert "20% off" in line


def test_tone_reaches_system_prompt(fake, settings, request_):
    OfferGenerator(fake, settings).generate(request_, tone="energetic")
    assert TONES["energetic"] in fake.calls[0]["system"]


def test_unknown_tone_fails_before_any_call(fake, settings, request_):
    with pytest.raises(ValidationError):
        OfferGenerator(fake, settings).generate(request_, tone="sarcastic")
    assert fake.calls == []
