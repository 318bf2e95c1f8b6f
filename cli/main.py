"""
CLI for Yelstar offer-copy ops.

Commands:
  normalize [TEXT] [--discount D]   Normalize RTL text (reads stdin without TEXT).
  prompt --goal .. --discount ..    Print the offer prompt without calling the model.
  offer  --goal .. --discount ..    Generate an offer with the configured OpenAI key.

Connections:
- service/text_normalizer.py for normalize
- service/offer_prompt.py for prompt
- app.container.Container for offer (same wiring as the web app)

Usage:
  python -m cli.main normalize "تخفیف ۵۰٪" --discount "20% off"
"""

from __future__ import annotations
import argparse
import json
import sys

from app.config import load_settings
from app.logging_setup import configure_logging
from service.offer_prompt import DEFAULT_TONE, TONES, OfferRequest, build_offer_prompt
from service.text_normalizer import normalize_rtl_text
from service.validators import ValidationError


def _offer_payload(args: argparse.Namespace) -> dict:
    return {
        "goal": args.goal,
        "discountType": args.discount,
        "productOrService": args.product,
        "category": args.category,
        "customMessage": args.message,
        "startDate": args.start,
        "endDate": args.end,
    }


def cmd_normalize(args: argparse.Namespace) -> int:
    text = args.text if args.text is not None else sys.stdin.read()
    print(normalize_rtl_text(text, args.discount))
    return 0


def cmd_prompt(args: argparse.Namespace) -> int:
    req = OfferRequest.from_payload(_offer_payload(args))
    prompt = build_offer_prompt(req, args.tone)
    print(json.dumps(prompt.messages(), ensure_ascii=False, indent=2))
    return 0


def cmd_offer(args: argparse.Namespace) -> int:
    from app.container import Container  # lazy: pulls in the openai SDK

    settings = load_settings()
    configure_logging(settings, to_files=False)
    req = OfferRequest.from_payload(_offer_payload(args), max_len=settings.MAX_FIELD_LEN)
    print(Container(settings).offers.generate(req, tone=args.tone))
    return 0


def _add_offer_args(sp: argparse.ArgumentParser) -> None:
    sp.add_argument("--goal", required=True)
    sp.add_argument("--discount", required=True, help='Discount type, e.g. "20% off"')
    sp.add_argument("--product", required=True, help="Product or service")
    sp.add_argument("--category", required=True, help="Category slug, e.g. cafe")
    sp.add_argument("--start", required=True, help="Start date YYYY-MM-DD")
    sp.add_argument("--end", required=True, help="End date YYYY-MM-DD")
    sp.add_argument("--message", default=None, help="Optional custom message")
    sp.add_argument("--tone", default=DEFAULT_TONE, choices=sorted(TONES))


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="yelstar-cli",
        description="Operational CLI for Yelstar offer copy"
    )
    sub = p.add_subparsers(dest="command", required=True)

    sp = sub.add_parser("normalize", help="Normalize RTL marketing text")
    sp.add_argument("text", nargs="?", default=None)
    sp.add_argument("--discount", default=None, help="Discount string whose number overrides percentages")
    sp.set_defaults(func=cmd_normalize)

    sp = sub.add_parser("prompt", help="Render the offer prompt as chat messages")
    _add_offer_args(sp)
    sp.set_defaults(func=cmd_prompt)

    sp = sub.add_parser("offer", help="Generate an offer via the completion service")
    _add_offer_args(sp)
    sp.set_defaults(func=cmd_offer)

    return p


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        return args.func(args)
    except KeyboardInterrupt:
        return 130
    except ValidationError as e:
        print(f"INVALID: {e.message}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
