"""File template compilation.

A template mixes literal text, strftime-style time directives (``%Y``,
``%m``, ...) and metadata tags (``$s``, ``$S``, ``$n``, ``$w``). It is parsed
once per run into a tuple of tokens that the renderer expands per file.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, Tuple, Union

from fit_archiver.core.constants import TAG_MARKER, TIME_MARKER
from fit_archiver.core.errors import InvalidTemplateError


class Tag(str, Enum):
    """Metadata tags supported after ``$``."""

    SPORT = "s"
    SUB_SPORT = "S"
    SPORT_NAME = "n"
    WORKOUT_NAME = "w"

    @property
    def field_name(self) -> str:
        return _TAG_FIELDS[self]


_TAG_FIELDS = {
    Tag.SPORT: "sport",
    Tag.SUB_SPORT: "sub_sport",
    Tag.SPORT_NAME: "sport_name",
    Tag.WORKOUT_NAME: "workout_name",
}
_TAGS_BY_CHAR = {tag.value: tag for tag in Tag}


@dataclass(frozen=True)
class Literal:
    text: str


@dataclass(frozen=True)
class TimeDirective:
    char: str

    @property
    def directive(self) -> str:
        return f"{TIME_MARKER}{self.char}"


@dataclass(frozen=True)
class CustomTag:
    tag: Tag


Token = Union[Literal, TimeDirective, CustomTag]


@dataclass(frozen=True)
class CompiledTemplate:
    """Ordered, read-only token sequence for one template string."""

    source: str
    tokens: Tuple[Token, ...]

    @property
    def tags(self) -> Tuple[Tag, ...]:
        return tuple(token.tag for token in self.tokens if isinstance(token, CustomTag))


def compile_template(template: str) -> CompiledTemplate:
    """Parse a template string into literal, time and tag tokens."""
    if not template:
        raise InvalidTemplateError("File template must not be empty")

    tokens: List[Token] = []
    literal: List[str] = []

    def flush() -> None:
        if literal:
            tokens.append(Literal("".join(literal)))
            literal.clear()

    index = 0
    length = len(template)
    while index < length:
        char = template[index]
        if char not in (TIME_MARKER, TAG_MARKER):
            literal.append(char)
            index += 1
            continue

        if index + 1 >= length:
            raise InvalidTemplateError(
                f"Template {template!r} ends with a dangling {char!r}"
            )
        following = template[index + 1]
        index += 2

        if char == TIME_MARKER:
            flush()
            tokens.append(TimeDirective(following))
        elif following in _TAGS_BY_CHAR:
            flush()
            tokens.append(CustomTag(_TAGS_BY_CHAR[following]))
        else:
            # Unknown tag, keep both characters.
            literal.append(char + following)

    flush()
    return CompiledTemplate(source=template, tokens=tuple(tokens))
