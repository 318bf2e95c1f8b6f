"""
Prompt assembly for offer / ad / enhancement calls.

Responsibilities:
- OfferRequest: validated, immutable view of the generate-offer payload
- format_date(): calendar date -> "{day} {EnglishMonth} {year}"
- category_type(): business category slug -> service | product | content
- build_*_prompt(): deterministic (system, user) pairs for the completion service

The English month spelling produced by format_date is the vocabulary
service/text_normalizer.py recognizes and wraps in LTR isolates.
"""

from __future__ import annotations
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Dict, List, Mapping, Optional, Union

from service.text_normalizer import MONTHS
from service.validators import (
    DATE_RANGE,
    DEFAULT_MAX_LEN,
    INVALID_DATE,
    MISSING_FIELDS,
    ValidationError,
    is_blank,
    sanitize_text,
    validate_json,
)

DateLike = Union[date, datetime, str]

CATEGORY_TYPES: Dict[str, str] = {
    # services
    "beauty-salon": "service",
    "health-beauty": "service",
    "realtor": "service",
    "lawyer": "service",
    "notary-public": "service",
    "immigration": "service",
    "dentist": "service",
    "psychotherapist": "service",
    "massage": "service",
    "teacher-trainer": "service",
    "it-service": "service",
    "photographer-videographer": "service",
    "cleaning": "service",
    "driving-school": "service",
    "event-planner": "service",
    "florist": "service",
    "restaurant": "service",
    "cafe": "service",
    "hookah-lounge": "service",
    "gym": "service",
    "tattoo": "service",
    "moving-service": "service",
    "accountant": "service",
    "mortgage-broker": "service",
    "exchange": "service",
    "insurance": "service",
    "chiropractor": "service",
    "acupuncturist": "service",
    "plumber": "service",
    "electrician-lighting": "service",
    # products
    "clothing": "product",
    "gift-shop": "product",
    "carpet-furniture": "product",
    "jewelry": "product",
    "market-bakery": "product",
    "decoration": "product",
    "food-shopping": "product",
    "cake-sweet": "product",
    "pickles-sour": "product",
    # content creators
    "blogger-entertainment": "content",
    "food-blogger": "content",
    "comedy": "content",
    "channel-magazine": "content",
    "podcast": "content",
    "association": "content",
    "magazine": "content",
    "tv": "content",
    "radio": "content",
}

TYPE_LABELS: Dict[str, str] = {
    "service": "خدمات",
    "product": "محصولات",
    "content": "محتوا",
}

TONES: Dict[str, str] = {
    "formal": "رسمی، دقیق و حرفه‌ای",
    "friendly": "صمیمی، گرم و قابل اعتماد",
    "energetic": "پرانرژی، هیجان‌انگیز و ترغیب‌کننده",
}
DEFAULT_TONE = "formal"

# wire key -> dataclass attribute
OFFER_FIELDS: Dict[str, str] = {
    "goal": "goal",
    "discountType": "discount_type",
    "productOrService": "product_or_service",
    "category": "category",
    "startDate": "start_date",
    "endDate": "end_date",
}

_TEXT = {"type": "string", "pattern": r"\S"}
_OPTIONAL_TEXT = {"type": ["string", "null"]}

# generate-offer body; dates are checked by parse_date
OFFER_SCHEMA: Dict[str, Any] = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "type": "object",
    "required": list(OFFER_FIELDS),
    "properties": {
        **{wire: _TEXT for wire in OFFER_FIELDS},
        "customMessage": _OPTIONAL_TEXT,
        "tone": {"enum": [*TONES, None]},
    },
}


def parse_date(value: DateLike, *, field: str = "date") -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    s = str(value or "").strip()
    try:
        if len(s) > 10:
            return datetime.fromisoformat(s.replace("Z", "+00:00")).date()
        return date.fromisoformat(s)
    except ValueError as e:
        raise ValidationError(f"Invalid date for {field}: {s!r}", [field], code=INVALID_DATE) from e


def format_date(value: DateLike) -> str:
    """
    format_date("2024-06-21") -> "21 June 2024"
    """
    d = parse_date(value)
    return f"{d.day} {MONTHS[d.month - 1]} {d.year}"


def category_type(category: Optional[str]) -> str:
    return CATEGORY_TYPES.get((category or "").strip().lower(), "service")


@dataclass(frozen=True)
class OfferPrompt:
    system: str
    user: str

    def messages(self) -> List[Dict[str, str]]:
        return [
            {"role": "system", "content": self.system},
            {"role": "user", "content": self.user},
        ]


@dataclass(frozen=True)
class OfferRequest:
    goal: str
    discount_type: str
    product_or_service: str
    category: str
    start_date: date
    end_date: date
    custom_message: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any], *, max_len: int = DEFAULT_MAX_LEN) -> "OfferRequest":
        """
        Build from the generate-offer JSON body (camelCase keys).
        Raises ValidationError listing every missing or mistyped field.
        """
        validate_json(payload, schema=OFFER_SCHEMA)
        start = parse_date(payload["startDate"], field="startDate")
        end = parse_date(payload["endDate"], field="endDate")
        custom = sanitize_text(payload.get("customMessage"), max_len=max_len) or None
        req = cls(
            goal=sanitize_text(payload["goal"], max_len=max_len),
            discount_type=sanitize_text(payload["discountType"], max_len=max_len),
            product_or_service=sanitize_text(payload["productOrService"], max_len=max_len),
            category=sanitize_text(payload["category"], max_len=max_len).lower(),
            start_date=start,
            end_date=end,
            custom_message=custom,
        )
        req.validate()
        return req

    def validate(self) -> None:
        missing = [wire for wire, attr in OFFER_FIELDS.items() if is_blank(getattr(self, attr))]
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}", missing, code=MISSING_FIELDS)
        if parse_date(self.end_date, field="endDate") < parse_date(self.start_date, field="startDate"):
            raise ValidationError("endDate is before startDate", ["endDate"], code=DATE_RANGE)

    @property
    def category_type(self) -> str:
        return category_type(self.category)


# ------------- offer -------------

OFFER_SYSTEM = (
    "شما یک کپی‌رایتر فارسی هستید که وظیفه تولید پیشنهادهای بازاریابی متناسب با نوع "
    "بیزینس (محصول، خدمات یا محتوا) را دارد. لحن متن باید {tone} باشد. از واژگان مرتبط "
    "استفاده کنید، از کلی‌گویی یا جملات بی‌ربط خودداری کنید، و ماه‌ها و اعداد را به "
    "صورت صحیح و انگلیسی نمایش دهید."
)

OFFER_RULES = (
    "قواعد نگارش:\n"
    "- نام ماه‌ها را دقیقاً با همین املای انگلیسی بنویس: {months}.\n"
    "- از هشتگ استفاده نکن.\n"
    "- هیچ کد تخفیفی از خودت نساز.\n"
    "- عدد تخفیف را دقیقاً مطابق «{discount}» بنویس.\n"
    "- تاریخ پایان را دقیقاً به صورت «{end}» ذکر کن.\n"
    "- حداکثر ۳ جمله کوتاه و خبری بنویس."
)


def resolve_tone(tone: Optional[str]) -> str:
    key = (tone or DEFAULT_TONE).strip().lower()
    if key not in TONES:
        raise ValidationError(f"Unknown tone: {tone!r}", ["tone"])
    return key


def build_offer_prompt(request: OfferRequest, tone: str = DEFAULT_TONE) -> OfferPrompt:
    request.validate()
    tone_key = resolve_tone(tone)

    start = format_date(request.start_date)
    end = format_date(request.end_date)
    type_label = TYPE_LABELS[request.category_type]

    details = f" جزئیات تکمیلی: {request.custom_message}" if request.custom_message else ""
    user = (
        f"بیزینسی با موضوع «{request.product_or_service}» در دسته‌بندی {request.category} "
        f"که مربوط به {type_label} است، قصد دارد با هدف «{request.goal}»، پیشنهادی با نوع "
        f"تخفیف «{request.discount_type}» از تاریخ {start} تا {end} ارائه دهد.{details}\n\n"
        f"لطفاً یک پیشنهاد جذاب و مؤثر در حداکثر ۳ خط بنویس، با توجه به اینکه این مورد "
        f"مربوط به {type_label} است. از واژگان مرتبط با {type_label} استفاده کن.\n\n"
        + OFFER_RULES.format(months=", ".join(MONTHS), discount=request.discount_type, end=end)
    )
    return OfferPrompt(system=OFFER_SYSTEM.format(tone=TONES[tone_key]), user=user)


# ------------- input enhancement -------------

ENHANCE_STYLES: Dict[str, Dict[str, str]] = {
    "offer": {
        "system": "شما ویراستار حرفه‌ای فارسی در حوزه متن‌های تجاری هستید. متن‌ها باید رسمی، دقیق و کوتاه باشند.",
        "user": "لطفاً این متن فارسی را برای استفاده رسمی تجاری به‌صورت حرفه‌ای، رسمی و کوتاه ویرایش کن:",
    },
    "ad": {
        "system": "شما ویراستار حرفه‌ای فارسی در حوزه متن‌های تبلیغاتی هستید. متن‌ها باید رسمی، جذاب و تأثیرگذار باشند.",
        "user": "لطفاً این متن فارسی را برای استفاده در آگهی تبلیغاتی به‌صورت حرفه‌ای، رسمی و جذاب ویرایش کن:",
    },
}


def build_enhance_prompt(text: str, style: str = "offer") -> OfferPrompt:
    s = ENHANCE_STYLES.get(style, ENHANCE_STYLES["offer"])
    return OfferPrompt(system=s["system"], user=f"{s['user']}\n\"{text}\"")


# ------------- advertisement -------------

AD_SYSTEM = (
    "شما یک کپی‌رایتر حرفه‌ای فارسی هستید که در تولید آگهی‌های تبلیغاتی تخصص دارید. "
    "متن‌های ورودی را به آگهی‌های حرفه‌ای و جذاب فارسی تبدیل کنید. متن‌ها باید رسمی، جذاب "
    "و تأثیرگذار باشند و به زبان فارسی روان نوشته شوند. تصاویر پیشنهادی باید مدرن و حرفه‌ای باشند."
)

AD_TEXT_RULES = (
    "حداکثر ۱ خط باشد",
    "رسمی و حرفه‌ای باشد",
    "جذاب و تأثیرگذار باشد",
    "متناسب با صفحه هدف باشد",
    "شامل call to action مناسب باشد",
    "از واژگان مرتبط با کسب‌وکار استفاده کند",
    "نباید عیناً از توضیحات اولیه کپی شود",
)

AD_IMAGE_RULES = (
    "دقیق و جزئی باشد",
    "مناسب برای تولید تصویر حرفه‌ای باشد",
    "مرتبط با محتوای آگهی باشد",
    "تصویر باید ساده و قابل فهم باشد",
    "از المان‌های اضافی و غیرضروری پرهیز شود",
    "از رنگ‌های جذاب و هماهنگ استفاده کند",
    "تصویر باید با تمرکز بر روی موضوع اصلی باشد",
)


def _bullets(rules) -> str:
    return "\n".join(f"- {r}" for r in rules)


def build_ad_prompt(title: str, description: str, target_page: str, image_description: str = "") -> OfferPrompt:
    user = (
        "یک بیزینس با مشخصات زیر قصد دارد یک آگهی تبلیغاتی حرفه‌ای ایجاد کند:\n\n"
        f"عنوان: {title}\n"
        f"توضیحات اولیه: {description}\n"
        f"صفحه هدف: {target_page}\n"
        f"توضیحات تصویر: {image_description}\n\n"
        "لطفاً یک آگهی تبلیغاتی کاملاً جدید بنویس. پاسخ را در دو بخش که با یک خط خالی از هم "
        "جدا شده‌اند بنویس: ابتدا متن آگهی، سپس توضیحات تصویر.\n\n"
        f"متن آگهی باید:\n{_bullets(AD_TEXT_RULES)}\n\n"
        f"توضیحات تصویر باید:\n{_bullets(AD_IMAGE_RULES)}"
    )
    return OfferPrompt(system=AD_SYSTEM, user=user)
