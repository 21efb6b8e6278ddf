from __future__ import annotations

import math
from unittest.mock import patch

import pytest

from processxls.services.amount_words import (
    amount_to_words,
    choose_form,
    format_rub_amount,
    number_to_words,
    parse_amount,
)

NBSP = "\u00a0"


@pytest.mark.parametrize(
    "value, expected",
    [
        (15000.5, 15000.5),
        (12, 12.0),
        ("1 234,56", 1234.56),
        ("1\u00a0234,5 руб.", 1234.5),
        ("12abc", 12.0),
        ("abc", 0.0),
        ("", 0.0),
        (None, 0.0),
        (True, 0.0),
        (math.inf, 0.0),
        (float("nan"), 0.0),
        ("-7,25", -7.25),
    ],
)
def test_parse_amount_never_raises(value, expected):
    assert parse_amount(value) == pytest.approx(expected)


def test_format_rub_amount_groups_with_nbsp_and_comma_decimal():
    assert format_rub_amount(15000.5) == f"15{NBSP}000,50{NBSP}₽"
    assert format_rub_amount(1234567.891) == f"1{NBSP}234{NBSP}567,89{NBSP}₽"
    assert format_rub_amount(0) == f"0,00{NBSP}₽"
    assert format_rub_amount("garbage") == f"0,00{NBSP}₽"
    assert format_rub_amount(-1500) == f"-1{NBSP}500,00{NBSP}₽"


def test_format_rub_amount_rounds_half_up():
    assert format_rub_amount(0.125) == f"0,13{NBSP}₽"
    assert format_rub_amount(999.999) == f"1{NBSP}000,00{NBSP}₽"


@pytest.mark.parametrize(
    "n, expected",
    [
        (1, "рубль"), (21, "рубль"), (101, "рубль"),
        (2, "рубля"), (3, "рубля"), (24, "рубля"),
        (0, "рублей"), (5, "рублей"), (11, "рублей"), (12, "рублей"),
        (14, "рублей"), (19, "рублей"), (111, "рублей"), (25, "рублей"),
    ],
)
def test_choose_form(n, expected):
    assert choose_form(n, "рубль", "рубля", "рублей") == expected


def test_number_to_words_gender_and_teens():
    assert number_to_words(0) == "ноль"
    assert number_to_words(1) == "один"
    assert number_to_words(1, feminine=True) == "одна"
    assert number_to_words(2, feminine=True) == "две"
    assert number_to_words(13) == "тринадцать"
    assert number_to_words(40) == "сорок"
    assert number_to_words(215) == "двести пятнадцать"
    assert number_to_words(999) == "девятьсот девяносто девять"


@pytest.mark.parametrize(
    "value, expected",
    [
        (0, "ноль рублей 00 копеек"),
        (1, "один рубль 00 копеек"),
        (2, "два рубля 00 копеек"),
        (5, "пять рублей 00 копеек"),
        (11, "одиннадцать рублей 00 копеек"),
        (21, "двадцать один рубль 00 копеек"),
        (1000, "одна тысяча рублей 00 копеек"),
        (2000, "две тысячи рублей 00 копеек"),
        (5000, "пять тысяч рублей 00 копеек"),
        (11000, "одиннадцать тысяч рублей 00 копеек"),
        (15000.5, "пятнадцать тысяч рублей 50 копеек"),
        (1001.01, "одна тысяча один рубль 01 копейка"),
        (2_000_000, "два миллиона рублей 00 копеек"),
        (1_234_567.22, "один миллион двести тридцать четыре тысячи пятьсот шестьдесят семь рублей 22 копейки"),
        (5_000_000_000, "пять миллиардов рублей 00 копеек"),
    ],
)
def test_amount_to_words(value, expected):
    assert amount_to_words(value) == expected


def test_amount_to_words_accepts_text_and_falls_back_to_zero():
    assert amount_to_words("2100,00") == "две тысячи сто рублей 00 копеек"
    assert amount_to_words("n/a") == "ноль рублей 00 копеек"


def test_cents_rounding_carries_into_rubles():
    assert amount_to_words(1.999) == "два рубля 00 копеек"
    assert amount_to_words(0.5) == "ноль рублей 50 копеек"


def test_negative_amount_spelled_by_absolute_value():
    assert amount_to_words(-3) == "три рубля 00 копеек"


def test_trillions_are_spelled():
    assert amount_to_words(2 * 10**12) == "два триллиона рублей 00 копеек"
    assert amount_to_words(10**12 + 5) == "один триллион пять рублей 00 копеек"


def test_amount_beyond_trillions_uses_digits_and_warns():
    with patch("processxls.services.amount_words.logger") as mock_logger:
        words = amount_to_words(10**15)
    assert words == f"1{NBSP}000{NBSP}000{NBSP}000{NBSP}000{NBSP}000 рублей 00 копеек"
    mock_logger.warning.assert_called_once()
