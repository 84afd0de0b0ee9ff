"""Front matter splitting for vuepy templates.

A template may start with a YAML block delimited by ``---`` lines:

    ```
    ---
    layout: post
    title: Hello
    ---
    <h1>{{ title }}</h1>
    ```

The mapping supplies template variables and the ``layout`` hint.
"""

from __future__ import annotations

import re
from typing import Any

import yaml

from vuepy.environment.exceptions import ErrorCode, TemplateSyntaxError

_FRONT_MATTER_RE = re.compile(
    r"\A\ufeff?---[ \t]*\r?\n(?P<yaml>.*?)(?:^|\r?\n)---[ \t]*(?:\r?\n|\Z)",
    re.DOTALL | re.MULTILINE,
)


def split_front_matter(
    source: str, name: str | None = None
) -> tuple[dict[str, Any], str]:
    """Split ``source`` into its front matter mapping and body.

    Sources without a leading ``---`` line have empty front matter.

    Raises:
        TemplateSyntaxError: If the block is not valid YAML or not a mapping.
    """
    match = _FRONT_MATTER_RE.match(source)
    if match is None:
        return {}, source

    block = match.group("yaml")
    try:
        data = yaml.safe_load(block)
    except yaml.YAMLError as e:
        mark = getattr(e, "problem_mark", None)
        raise TemplateSyntaxError(
            f"invalid front matter: {getattr(e, 'problem', None) or e}",
            # +1 for the opening delimiter line
            lineno=mark.line + 2 if mark is not None else None,
            source=source,
            template_name=name,
            code=ErrorCode.INVALID_FRONT_MATTER,
        ) from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise TemplateSyntaxError(
            f"front matter must be a mapping, got {type(data).__name__}",
            lineno=2,
            source=source,
            template_name=name,
            code=ErrorCode.INVALID_FRONT_MATTER,
        )
    return {str(key): value for key, value in data.items()}, source[match.end() :]
