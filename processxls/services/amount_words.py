from __future__ import annotations

import logging
import math
import re
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

"""Russian currency amounts: parsing, formatting and spelling out.

    >>> format_rub_amount(1234567.5)
    '1\\xa0234\\xa0567,50\\xa0₽'
    >>> amount_to_words(21)
    'двадцать один рубль 00 копеек'
"""

__all__ = [
    "parse_amount",
    "format_rub_amount",
    "choose_form",
    "number_to_words",
    "amount_to_words",
]

logger = logging.getLogger(__name__)

NBSP = "\u00a0"
CURRENCY_SIGN = "₽"

_NUMERIC_PREFIX = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")
_WHITESPACE = re.compile(r"\s")

_ONES_M = ["ноль", "один", "два", "три", "четыре", "пять", "шесть", "семь", "восемь", "девять"]
_ONES_F = ["ноль", "одна", "две", "три", "четыре", "пять", "шесть", "семь", "восемь", "девять"]
_TEENS = [
    "десять", "одиннадцать", "двенадцать", "тринадцать", "четырнадцать",
    "пятнадцать", "шестнадцать", "семнадцать", "восемнадцать", "девятнадцать",
]
_TENS = [
    "", "", "двадцать", "тридцать", "сорок",
    "пятьдесят", "шестьдесят", "семьдесят", "восемьдесят", "девяносто",
]
_HUNDREDS = [
    "", "сто", "двести", "триста", "четыреста",
    "пятьсот", "шестьсот", "семьсот", "восемьсот", "девятьсот",
]

# (divisor, forms, feminine)
_SCALES: list[tuple[int, tuple[str, str, str] | None, bool]] = [
    (1_000_000_000_000, ("триллион", "триллиона", "триллионов"), False),
    (1_000_000_000, ("миллиард", "миллиарда", "миллиардов"), False),
    (1_000_000, ("миллион", "миллиона", "миллионов"), False),
    (1_000, ("тысяча", "тысячи", "тысяч"), True),
    (1, None, False),
]
_RUB_FORMS = ("рубль", "рубля", "рублей")
_KOP_FORMS = ("копейка", "копейки", "копеек")
SPELL_LIMIT = 10**15  # rubles at or above this are written in digits


def parse_amount(value: Any) -> float:
    """Best-effort amount parsing; never raises.

    Native numbers are used as is. Text has its first comma turned into a
    decimal point and whitespace removed; the leading numeric part is parsed.
    Unparsable and non-finite values give 0.
    """
    if isinstance(value, bool) or value is None:
        return 0.0
    if isinstance(value, int | float | Decimal):
        x = float(value)
    else:
        text = _WHITESPACE.sub("", str(value).replace(",", ".", 1))
        m = _NUMERIC_PREFIX.match(text)
        x = float(m.group(0)) if m else 0.0
    return x if math.isfinite(x) else 0.0


def format_rub_amount(value: Any) -> str:
    """``12345.678`` -> ``12 345,68 ₽`` (NBSP separators, half-up rounding)."""
    x = Decimal(parse_amount(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    sign = "-" if x < 0 else ""
    int_part, frac = f"{abs(x):.2f}".split(".")
    grouped = f"{int(int_part):,}".replace(",", NBSP)
    return f"{sign}{grouped},{frac}{NBSP}{CURRENCY_SIGN}"


def choose_form(n: int, one: str, few: str, many: str) -> str:
    """Pick the plural form agreeing with ``n`` (1 / 2-4 / other, 11-19 -> many)."""
    n = abs(n)
    n10 = n % 10
    n100 = n % 100
    if 11 <= n100 <= 19:
        return many
    if n10 == 1:
        return one
    if 2 <= n10 <= 4:
        return few
    return many


def number_to_words(n: int, feminine: bool = False) -> str:
    """Spell a number 0..999 (the ``ones`` gender matters for 1 and 2)."""
    ones = _ONES_F if feminine else _ONES_M
    n = abs(n) % 1000
    hundreds, tens, units = n // 100, n % 100 // 10, n % 10
    words = []
    if hundreds:
        words.append(_HUNDREDS[hundreds])
    if tens == 1:
        words.append(_TEENS[units])
    else:
        if tens:
            words.append(_TENS[tens])
        if units or not words:
            words.append(ones[units])
    return " ".join(words)


def _split_amount(value: Any) -> tuple[int, int]:
    x = abs(parse_amount(value))
    rub = math.floor(x + 1e-9)
    kop = math.floor((x - rub) * 100 + 0.5)
    if kop >= 100:
        rub, kop = rub + 1, kop - 100
    return rub, kop


def amount_to_words(value: Any) -> str:
    """Spell out an amount: ``<integer words> <рубль form> <NN> <копейка form>``.

    Triads are spelled independently; thousands take feminine numerals.
    Negative amounts are spelled by their absolute value. Amounts from
    ``SPELL_LIMIT`` rubles up keep their ruble part in grouped digits and log
    a warning.
    """
    rub, kop = _split_amount(value)
    if rub >= SPELL_LIMIT:
        logger.warning(f"amount too large to spell out, using digits: {rub}")
        parts = [f"{rub:,}".replace(",", NBSP)]
    else:
        parts = _spell_rubles(rub)
    return f"{' '.join(parts)} {choose_form(rub, *_RUB_FORMS)} {kop:02d} {choose_form(kop, *_KOP_FORMS)}"


def _spell_rubles(rub: int) -> list[str]:
    parts: list[str] = []
    for divisor, forms, feminine in _SCALES:
        triad = rub // divisor % 1000
        if not triad:
            continue
        parts.append(number_to_words(triad, feminine))
        if forms is not None:
            parts.append(choose_form(triad, *forms))
    if not parts:
        parts.append(_ONES_M[0])
    return parts
