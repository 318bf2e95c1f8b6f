"""
RTL text normalizer for generated Farsi marketing copy.

Design:
- An explicit ordered pipeline of pure str -> str steps (PIPELINE).
- Each step is importable and tested on its own.
- The whole pipeline is idempotent: the first step strips every bidi mark,
  and only the month and number steps add them back, in fixed positions.
- Total over str input; never raises.

Pipeline:
    strip_direction_marks -> collapse_whitespace -> canonicalize_months
    -> to_latin_digits -> normalize_percentages -> normalize_punctuation
    -> [override_discount] -> isolate_numbers

API:
    normalize_rtl_text("تخفیف ۵۰٪ ...", discount_type="20% off")
    tidy_text("draft  text .")   # marks/whitespace/punctuation only
"""

from __future__ import annotations
import functools
import re
from typing import Callable, Dict, List, Optional, Tuple

Step = Callable[[str], str]

# Left-to-right isolate / pop directional isolate
LRI = "\u2066"
PDI = "\u2069"

MONTHS: Tuple[str, ...] = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)

PERSIAN_DIGITS = "۰۱۲۳۴۵۶۷۸۹"
ARABIC_INDIC_DIGITS = "٠١٢٣٤٥٦٧٨٩"
# Arabic decimal and thousands separators travel with the digits
_DIGIT_MAP = str.maketrans(
    PERSIAN_DIGITS + ARABIC_INDIC_DIGITS + "\u066b\u066c",
    "0123456789" * 2 + ".,",
)

ARABIC_PERCENT = "\u066a"

_DIRECTION_MARKS = re.compile("[\u200e\u200f\u202a-\u202e\u2066-\u2069]")
_WS = re.compile(r"\s+")
_LATIN_RUN = re.compile(r"(?<![A-Za-z])[A-Za-z]{3,9}(?![A-Za-z])")

# a number token: 12, 12.5, 1,000
_NUMBER = r"[0-9]+(?:[.,][0-9]+)*"
_NUMBER_RE = re.compile(_NUMBER)
_NUMERIC_TOKEN = re.compile(_NUMBER + "%?")
_PERCENT_TOKEN = re.compile(r"(?<![0-9])" + _NUMBER + "%")
_DISCOUNT_PERCENT = re.compile("(" + _NUMBER + r")\s*[%" + ARABIC_PERCENT + "]")

_ARABIC_PERCENT_AFTER = re.compile(r"([0-9]+)\s*" + ARABIC_PERCENT)
# a leading sign only moves when the whole number does not already carry one
_NUMBER_END = r"(?![0-9%" + ARABIC_PERCENT + r"]|[.,][0-9])"
_ARABIC_PERCENT_BEFORE = re.compile(ARABIC_PERCENT + r"\s*(" + _NUMBER + ")" + _NUMBER_END)
_PERCENT_SPACED = re.compile(r"([0-9]+)\s+%")
_PERCENT_LEADING = re.compile(r"(?<![0-9])%(" + _NUMBER + ")" + _NUMBER_END)
# signs in front of a number that already carries its own: "%5%", "% 50%"
_PERCENT_DUPLICATE = re.compile(r"(?<![0-9])%+(\s*)(?=" + _NUMBER + "%)")

TERMINAL_MARKS = ".,;!?\u060c\u061b\u061f"  # Arabic comma, semicolon, question mark
OPENING_MARKS = "(«"
CLOSING_MARKS = ")»"
_TERMINAL = re.compile(r"\s*([" + re.escape(TERMINAL_MARKS) + r"]+)\s*")
_OPENING = re.compile(r"\s*([" + re.escape(OPENING_MARKS) + r"]+)\s*")
_CLOSING = re.compile(r"\s*([" + re.escape(CLOSING_MARKS) + r"]+)\s*")


def _month_table() -> Dict[str, str]:
    return {m.lower(): m for m in MONTHS}


def _reversed_month_table() -> Dict[str, str]:
    return {m[::-1]: m for m in MONTHS}


_MONTH_BY_LOWER = _month_table()
_MONTH_BY_REVERSED = _reversed_month_table()


def wrap_ltr(token: str) -> str:
    return f"{LRI}{token}{PDI}"


# ------------- steps -------------

def strip_direction_marks(text: str) -> str:
    return _DIRECTION_MARKS.sub("", text)


def collapse_whitespace(text: str) -> str:
    return _WS.sub(" ", text).strip()


def canonical_month(word: str) -> Optional[str]:
    """
    Canonical spelling for a month name in any casing, or for its exact
    character reversal.
    """
    found = _MONTH_BY_LOWER.get(word.lower())
    if found:
        return found
    # Workaround: some RTL renderers hand back embedded Latin words reversed
    # ("enuJ"). Only the exact reversal of the canonical spelling is accepted.
    return _MONTH_BY_REVERSED.get(word)


def canonicalize_months(text: str) -> str:
    def _sub(m: re.Match) -> str:
        month = canonical_month(m.group(0))
        return wrap_ltr(month) if month else m.group(0)

    return _LATIN_RUN.sub(_sub, text)


def to_latin_digits(text: str) -> str:
    return text.translate(_DIGIT_MAP)


def normalize_percentages(text: str) -> str:
    """
    Expects Latin digits (run after to_latin_digits).

    "50 ٪" -> "50%", "٪50" -> "50%", "50 %" -> "50%", "%50" -> "50%".
    Every ٪ left over becomes "%"; a percent sign with no adjacent number
    is otherwise left as is.
    """
    text = _ARABIC_PERCENT_AFTER.sub(r"\1%", text)
    text = _ARABIC_PERCENT_BEFORE.sub(r"\1%", text)
    text = text.replace(ARABIC_PERCENT, "%")
    text = _PERCENT_SPACED.sub(r"\1%", text)
    text = _PERCENT_LEADING.sub(r"\1%", text)
    return _PERCENT_DUPLICATE.sub(r"\1", text)


def _terminal(m: re.Match) -> str:
    marks = m.group(1)
    s = m.string
    start, end = m.start(1), m.end(1)
    # decimal / thousands separator
    if marks in (".", ",") and start > 0 and end < len(s):
        if s[start - 1].isascii() and s[start - 1].isdigit() and s[end].isascii() and s[end].isdigit():
            return marks
    return f"{marks} "


def _closing(m: re.Match) -> str:
    nxt = m.string[m.end():m.end() + 1]
    if nxt and nxt in TERMINAL_MARKS:
        return m.group(1)
    return f"{m.group(1)} "


def normalize_punctuation(text: str) -> str:
    """
    No space before a terminal mark, exactly one after it.
    Opening marks get one space before and none after; closing marks the reverse.
    """
    text = _TERMINAL.sub(_terminal, text)
    text = _OPENING.sub(lambda m: f" {m.group(1)}", text)
    text = _CLOSING.sub(_closing, text)
    return collapse_whitespace(text)


def discount_number(discount_type: Optional[str]) -> Optional[str]:
    """
    The number a discount description asks for. A number carrying a percent
    sign wins over the first bare number.
    """
    if not discount_type:
        return None
    s = to_latin_digits(discount_type)
    m = _DISCOUNT_PERCENT.search(s)
    if m:
        return m.group(1)
    m = _NUMBER_RE.search(s)
    return m.group(0) if m else None


def override_discount(text: str, discount_type: Optional[str] = None) -> str:
    number = discount_number(discount_type)
    if not number:
        return text
    return _PERCENT_TOKEN.sub(f"{number}%", text)


def isolate_numbers(text: str) -> str:
    return _NUMERIC_TOKEN.sub(lambda m: wrap_ltr(m.group(0)), text)


PIPELINE: Tuple[Step, ...] = (
    strip_direction_marks,
    collapse_whitespace,
    canonicalize_months,
    to_latin_digits,
    normalize_percentages,
    normalize_punctuation,
    isolate_numbers,
)

TIDY_PIPELINE: Tuple[Step, ...] = (
    strip_direction_marks,
    collapse_whitespace,
    normalize_punctuation,
)


def build_pipeline(discount_type: Optional[str] = None) -> List[Step]:
    steps = list(PIPELINE)
    if discount_type:
        steps.insert(steps.index(isolate_numbers), functools.partial(override_discount, discount_type=discount_type))
    return steps


def run_pipeline(text: Optional[str], steps) -> str:
    out = text or ""
    for step in steps:
        out = step(out)
    return out


def normalize_rtl_text(text: Optional[str], discount_type: Optional[str] = None) -> str:
    return run_pipeline(text, build_pipeline(discount_type))


def tidy_text(text: Optional[str]) -> str:
    return run_pipeline(text, TIDY_PIPELINE)
