"""Uppdelning av SIE-rader i etikett och fält.

Ett fält är antingen citerad text, ett ``{...}``-block eller ett nakent ord.
Skillnaden behövs eftersom heuristiken för datum och utfyllnad bara ska
tillämpas på fältets innehåll, medan ett tomt citerat fält (``""``) ändå är
ett eget fält.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple, Union

__all__ = [
    "Bare",
    "Braced",
    "Field",
    "Quoted",
    "SieTokenError",
    "field_text",
    "is_date_token",
    "is_filler_token",
    "meaningful_trailing_fields",
    "split_fields",
    "tokenize",
]

FILLER_MAX_VALUE = 100


class SieTokenError(ValueError):
    """Raden kunde inte delas upp, t.ex. på grund av ett oavslutat citat."""


@dataclass(frozen=True)
class Quoted:
    value: str


@dataclass(frozen=True)
class Braced:
    """Innehållet mellan ``{`` och ``}``, utan omgivande blanksteg."""

    value: str


@dataclass(frozen=True)
class Bare:
    value: str


Field = Union[Quoted, Braced, Bare]


def field_text(field: Optional[Field]) -> str:
    return field.value if field is not None else ""


def split_fields(text: str) -> List[Field]:
    """Delar upp en rad i fält enligt SIE:s citat- och klammerregler."""

    fields: List[Field] = []
    index = 0
    length = len(text)

    while index < length:
        char = text[index]
        if char.isspace():
            index += 1
            continue

        if char == '"':
            index += 1
            chars: List[str] = []
            while True:
                if index >= length:
                    raise SieTokenError("Oavslutat citattecken.")
                current = text[index]
                if current == '"':
                    if index + 1 < length and text[index + 1] == '"':
                        chars.append('"')
                        index += 2
                        continue
                    index += 1
                    break
                chars.append(current)
                index += 1
            fields.append(Quoted("".join(chars)))
            continue

        if char == "{":
            end = text.find("}", index + 1)
            if end < 0:
                raise SieTokenError("Oavslutad klammer.")
            fields.append(Braced(text[index + 1 : end].strip()))
            index = end + 1
            continue

        start = index
        while index < length and not text[index].isspace() and text[index] not in '"{':
            index += 1
        fields.append(Bare(text[start:index]))

    return fields


def tokenize(line: str) -> Optional[Tuple[str, List[Field]]]:
    """Returnerar ``(etikett, fält)`` för en ``#``-rad, annars ``None``."""

    stripped = line.strip()
    if not stripped.startswith("#"):
        return None

    fields = split_fields(stripped[1:])
    if not fields or not isinstance(fields[0], Bare) or not fields[0].value:
        return None
    return fields[0].value.upper(), fields[1:]


def is_date_token(field: Optional[Field]) -> bool:
    text = field_text(field)
    return len(text) == 8 and text.isascii() and text.isdigit()


def is_filler_token(field: Optional[Field]) -> bool:
    """Korta heltal (högst 100) i transaktionsradens svans räknas som utfyllnad."""

    text = field_text(field)
    return text.isascii() and text.isdigit() and int(text) <= FILLER_MAX_VALUE


def meaningful_trailing_fields(fields: Sequence[Field]) -> List[Field]:
    return [
        field
        for field in fields
        if field_text(field) != "" and not is_filler_token(field)
    ]
