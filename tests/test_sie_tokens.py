from __future__ import annotations

import pytest

from norrsken.sie.tokens import (
    Bare,
    Braced,
    Quoted,
    SieTokenError,
    is_date_token,
    is_filler_token,
    meaningful_trailing_fields,
    split_fields,
    tokenize,
)


def test_split_fields_tags_quoted_braced_and_bare_fields() -> None:
    fields = split_fields('1930 {1 "100" 6 P1} -250.50 "Betalning av faktura"')

    assert fields == [
        Bare("1930"),
        Braced('1 "100" 6 P1'),
        Bare("-250.50"),
        Quoted("Betalning av faktura"),
    ]


def test_split_fields_keeps_empty_quoted_field_and_unescapes_quotes() -> None:
    fields = split_fields('"" "Säg ""hej"""')

    assert fields == [Quoted(""), Quoted('Säg "hej"')]


def test_split_fields_raises_on_unterminated_quote() -> None:
    with pytest.raises(SieTokenError):
        split_fields('#FNAMN "Exempel AB')


def test_split_fields_raises_on_unterminated_brace() -> None:
    with pytest.raises(SieTokenError):
        split_fields("1930 {1 100 250")


def test_tokenize_uppercases_label_and_skips_non_record_lines() -> None:
    assert tokenize("  #konto 1930 Bank") == ("KONTO", [Bare("1930"), Bare("Bank")])
    assert tokenize("Detta är en kommentar") is None
    assert tokenize("#") is None


def test_is_date_token_requires_eight_ascii_digits() -> None:
    assert is_date_token(Bare("20240131"))
    assert is_date_token(Quoted("20240131"))
    assert not is_date_token(Bare("2024013"))
    assert not is_date_token(Bare("2024-01-31"))
    assert not is_date_token(Bare("２０２４０１３１"))


def test_is_filler_token_accepts_short_integers_up_to_hundred() -> None:
    assert is_filler_token(Bare("0"))
    assert is_filler_token(Bare("100"))
    assert not is_filler_token(Bare("101"))
    assert not is_filler_token(Bare("1.5"))
    assert not is_filler_token(Quoted("Hyra"))


def test_meaningful_trailing_fields_drops_empty_and_filler() -> None:
    fields = [Quoted(""), Bare("0"), Quoted("Text"), Bare("150")]

    assert meaningful_trailing_fields(fields) == [Quoted("Text"), Bare("150")]
