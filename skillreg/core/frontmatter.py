from __future__ import annotations

from typing import Any

import yaml

from skillreg.core.errors import ParseError

DELIMITER = "---"


def split_frontmatter(text: str, source: str | None = None) -> tuple[dict[str, Any], str]:
    """Split a Markdown document into its YAML front matter and body.

    The document must open with a ``---`` line and the block runs to the next
    line consisting only of ``---``. Raises ParseError when the block is absent,
    unterminated, not valid YAML, or not a mapping.
    """
    lines = text.lstrip("\ufeff").splitlines()
    if not lines or lines[0].strip() != DELIMITER:
        raise ParseError("document does not start with a front-matter block", source)

    for end, line in enumerate(lines[1:], start=1):
        if line.strip() == DELIMITER:
            break
    else:
        raise ParseError("front-matter block is not terminated", source)

    raw = "\n".join(lines[1:end])
    try:
        meta = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ParseError("front matter is not valid YAML", source, [str(e)]) from e

    if meta is None:
        meta = {}
    if not isinstance(meta, dict):
        raise ParseError("front matter must be a mapping", source)

    body = "\n".join(lines[end + 1 :]).strip("\n")
    return meta, body
