"""Template rendering for a single activity."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List

from fit_archiver.core.constants import PATH_SEPARATOR, UNKNOWN
from fit_archiver.core.errors import RenderError
from fit_archiver.core.models import Metadata, RenderedPath
from fit_archiver.core.template import CompiledTemplate, CustomTag, Literal, TimeDirective
from fit_archiver.utils.text import sanitize_component

logger = logging.getLogger(__name__)

_FORBIDDEN_SEGMENTS = {"", ".", ".."}


def tag_value(meta: Metadata, token: CustomTag) -> str:
    """Return the sanitized metadata value for a tag token."""
    raw = getattr(meta, token.tag.field_name) or UNKNOWN
    return sanitize_component(str(raw))


def render(
    template: CompiledTemplate,
    meta: Metadata,
    base: Path,
    suffix: str = "",
) -> RenderedPath:
    """Expand a compiled template into a destination below ``base``.

    ``suffix`` is the source file extension (including the dot) and is
    appended once after all tokens are expanded.
    """
    if meta.timestamp is None:
        raise RenderError("Activity has no timestamp")

    parts: List[str] = []
    for token in template.tokens:
        if isinstance(token, Literal):
            parts.append(token.text)
        elif isinstance(token, TimeDirective):
            try:
                parts.append(meta.timestamp.strftime(token.directive))
            except ValueError as exc:
                raise RenderError(f"Invalid time directive {token.directive!r}: {exc}") from exc
        elif isinstance(token, CustomTag):
            parts.append(tag_value(meta, token))
        else:
            raise RenderError(f"Unsupported template token {token!r}")

    rendered = "".join(parts)
    for segment in rendered.split(PATH_SEPARATOR):
        if segment in _FORBIDDEN_SEGMENTS:
            raise RenderError(
                f"Template {template.source!r} renders to invalid path {rendered!r}"
            )

    relative = rendered + suffix

    logger.debug("Rendered %r to %r", template.source, relative)
    return RenderedPath(base=base, relative=relative)
