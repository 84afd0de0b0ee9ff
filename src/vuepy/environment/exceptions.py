"""Exceptions for the vuepy template system.

Exception Hierarchy:
TemplateError (base)
├── TemplateNotFoundError         # Template not found by loader
├── TemplateSyntaxError           # Markup, front matter or v-for syntax
│   └── ParseError                # Malformed expression (parser.errors)
└── TemplateRuntimeError          # Render-time failure with context
    ├── UnknownFilterError        # Filter name not registered
    ├── FilterArgumentError       # Argument could not be coerced
    ├── FilterArgumentCountError  # Wrong number of filter arguments
    ├── RequiredPropError         # Include site omitted a :required prop
    └── ResourceLimitError        # Include/layout depth or loop budget

ScopeStackError (RuntimeError)    # Scope stack misuse (programming error)

Diagnostic Context:
Errors are raised without context at the point of failure and annotated
on the way out by ``TemplateError.annotate()``. Each layer fills in only
what is still missing, so the innermost expression, template name and
inclusion chain survive propagation through nested includes.

Example:
    ```
    Runtime Error: double(): cannot convert argument 0 from list to int
      Location: components/price.html
      Expression: items | double
      Included from:
        • page.html
    ```

"""

from __future__ import annotations

from collections.abc import Sequence
from enum import Enum
from typing import Any, Self

from vuepy.environment import terminal

# ---------------------------------------------------------------------------
# Error codes
# ---------------------------------------------------------------------------

_VUEPY_DOCS_BASE = "https://vuepy.readthedocs.io/en/latest/errors"


class ErrorCode(Enum):
    """Searchable error codes for vuepy template errors.

    Format: V-{CATEGORY}-{NUMBER}
    Categories: PAR (parser), RUN (runtime), TPL (template loading)

    Each code maps to a documentation URL for quick lookup:
        https://vuepy.readthedocs.io/en/latest/errors/#v-run-001
    """

    # Parser errors (V-PAR-xxx)
    UNEXPECTED_TOKEN = "V-PAR-001"
    INVALID_EXPRESSION = "V-PAR-002"
    INVALID_LOOP = "V-PAR-003"
    INVALID_FRONT_MATTER = "V-PAR-004"

    # Runtime errors (V-RUN-xxx)
    UNKNOWN_FILTER = "V-RUN-001"
    FILTER_ARGUMENT = "V-RUN-002"
    FILTER_ARGUMENT_COUNT = "V-RUN-003"
    FILTER_ERROR = "V-RUN-004"
    REQUIRED_PROP = "V-RUN-005"
    INCLUDE_DEPTH = "V-RUN-006"
    LAYOUT_DEPTH = "V-RUN-007"
    LOOP_LIMIT = "V-RUN-008"
    RUNTIME_ERROR = "V-RUN-009"

    # Template loading errors (V-TPL-xxx)
    TEMPLATE_NOT_FOUND = "V-TPL-001"
    SYNTAX_ERROR = "V-TPL-002"

    @property
    def docs_url(self) -> str:
        """Documentation URL for this error code."""
        anchor = self.value.lower()
        return f"{_VUEPY_DOCS_BASE}/#{anchor}"

    @property
    def category(self) -> str:
        """Error category (e.g., 'runtime', 'parser', 'template')."""
        prefix = self.value.split("-")[1]
        return {
            "PAR": "parser",
            "RUN": "runtime",
            "TPL": "template",
        }.get(prefix, "unknown")


def format_inclusion_chain(chain: Sequence[str], *, color: bool = False) -> str:
    """Format the templates that included the failing one.

    Args:
        chain: Template names from the outermost render to the failing template
        color: Apply terminal colors

    Returns:
        "Included from:" trail, or "" when the failure is in the outermost template

    Example:
        >>> print(format_inclusion_chain(["page.html", "nav.html", "link.html"]))
          Included from:
            • page.html
            • nav.html
    """
    if len(chain) < 2:
        return ""
    header = "Included from:"
    lines = [f"  {terminal.paint('muted', header) if color else header}"]
    for name in chain[:-1]:
        lines.append(f"    • {terminal.paint('location', name) if color else name}")
    return "\n".join(lines)


class TemplateError(Exception):
    """Base exception for all vuepy template errors.

    All template-related exceptions inherit from this class, enabling
    broad exception handling:

        >>> try:
        ...     template.render()
        ... except TemplateError as e:
        ...     print(e.format_compact())

    Attributes:
        message: Error description without context
        expression: Expression or directive source that failed
        template_name: Name of the template being rendered
        chain: Inclusion chain, outermost first, ending at the failing template
        suggestion: Actionable fix suggestion
        code: Optional ErrorCode for searchable error identification
    """

    code: ErrorCode | None = None

    def __init__(
        self,
        message: str,
        *,
        expression: str | None = None,
        template_name: str | None = None,
        chain: Sequence[str] | None = None,
        suggestion: str | None = None,
        code: ErrorCode | None = None,
    ):
        if code is not None:
            self.code = code
        self.message = message
        self.expression = expression
        self.template_name = template_name
        self.chain: list[str] = list(chain) if chain else []
        self.suggestion = suggestion
        super().__init__(self._format_message())

    def annotate(
        self,
        *,
        expression: str | None = None,
        template_name: str | None = None,
        chain: Sequence[str] | None = None,
    ) -> Self:
        """Fill in diagnostic context that an inner layer did not set.

        Returns the same exception so callers can ``raise exc.annotate(...)``.
        """
        changed = False
        if self.expression is None and expression is not None:
            self.expression = expression
            changed = True
        if self.template_name is None and template_name is not None:
            self.template_name = template_name
            changed = True
        if not self.chain and chain:
            self.chain = list(chain)
            changed = True
        if changed:
            self.args = (self._format_message(),)
        return self

    def _header(self) -> str:
        return self.message

    def _format_message(self) -> str:
        parts = [self._header()]
        if self.template_name:
            parts.append(f"  Location: {self.template_name}")
        if self.expression:
            parts.append(f"  Expression: {self.expression}")
        trail = format_inclusion_chain(self.chain)
        if trail:
            parts.append(trail)
        if self.suggestion:
            parts.append(f"  Suggestion: {self.suggestion}")
        return "\n".join(parts)

    def format_compact(self) -> str:
        """Format error as a structured, human-readable summary.

        Produces a clean diagnostic string suitable for terminal display,
        without Python traceback noise.

        Format::

            V-RUN-005: required attribute 'title' not provided
              Location: page.html
              Expression: <template include="card.html">
              Included from:
                • layout.html
              Hint: Pass title="..." or :title="..." at the include site
              Docs: https://vuepy.readthedocs.io/en/latest/errors/#v-run-005

        Returns:
            Multi-line string with error code, message, context and docs URL.
        """
        parts: list[str] = [
            terminal.format_error_header(self.code.value if self.code else None, self.message)
        ]
        if self.template_name:
            parts.append(f"  Location: {terminal.paint('location', self.template_name)}")
        if self.expression:
            parts.append(f"  Expression: {self.expression}")
        trail = format_inclusion_chain(self.chain, color=True)
        if trail:
            parts.append(trail)
        if self.suggestion:
            parts.append(f"  {terminal.paint('hint', 'Hint:')} {self.suggestion}")
        if self.code:
            docs = terminal.paint("link", self.code.docs_url)
            parts.append(f"  {terminal.paint('muted', 'Docs:')} {docs}")
        return "\n".join(parts)


class TemplateNotFoundError(TemplateError):
    """Template not found by any configured loader.

    Raised when `Environment.get_template(name)` cannot locate the template,
    including include targets and layouts.

    Example:
            >>> env.get_template("nonexistent.html")
        TemplateNotFoundError: Template 'nonexistent.html' not found in: templates/

    """

    code: ErrorCode | None = ErrorCode.TEMPLATE_NOT_FOUND


class TemplateSyntaxError(TemplateError):
    """Parse-time syntax error in template source.

    Raised for malformed front matter, malformed ``v-for`` expressions and
    (through ``ParseError``) malformed expressions.

    When ``source`` and ``lineno`` are provided, the error message includes
    the offending line. If ``col_offset`` is also given, a caret (``^``)
    points at the exact column.
    """

    code: ErrorCode | None = ErrorCode.SYNTAX_ERROR

    def __init__(
        self,
        message: str,
        *,
        lineno: int | None = None,
        col_offset: int | None = None,
        source: str | None = None,
        filename: str | None = None,
        **kwargs: Any,
    ):
        self.lineno = lineno
        self.col_offset = col_offset
        self.source = source
        self.filename = filename
        super().__init__(message, **kwargs)

    def _header(self) -> str:
        return f"Syntax Error: {self.message}"

    def _snippet(self) -> list[str]:
        if not (self.source and self.lineno):
            return []
        lines = self.source.splitlines()
        if not 0 < self.lineno <= len(lines):
            return []
        snippet = ["   |", f"{self.lineno:>3} | {lines[self.lineno - 1]}"]
        if self.col_offset is not None:
            snippet.append(f"   | {' ' * self.col_offset}^")
        return snippet

    def _format_message(self) -> str:
        parts = [super()._format_message()]
        if self.filename and self.filename != self.template_name:
            parts.append(f"  --> {self.filename}")
        parts.extend(self._snippet())
        return "\n".join(parts)


class TemplateRuntimeError(TemplateError):
    """Render-time error with debugging context.

    Raised during rendering when an evaluation or resolution step fails.

    Output Format:
            ```
            Runtime Error: comparison between 'str' and 'int' is not supported
              Location: product.html
              Expression: price > limit
              Values:
                price = '10' (str)
                limit = 5 (int)
            ```

    Attributes:
        values: Dict of names → values relevant to the failure
    """

    code: ErrorCode | None = ErrorCode.RUNTIME_ERROR

    def __init__(
        self,
        message: str,
        *,
        values: dict[str, Any] | None = None,
        **kwargs: Any,
    ):
        self.values = values or {}
        super().__init__(message, **kwargs)

    def _header(self) -> str:
        return f"Runtime Error: {self.message}"

    def _format_message(self) -> str:
        parts = [super()._format_message()]
        if self.values:
            parts.append("  Values:")
            for name, value in self.values.items():
                type_name = type(value).__name__
                # Truncate long values
                value_repr = repr(value)
                if len(value_repr) > 80:
                    value_repr = value_repr[:77] + "..."
                parts.append(f"    {name} = {value_repr} ({type_name})")
        return "\n".join(parts)


class UnknownFilterError(TemplateRuntimeError):
    """Expression referenced a filter that is not registered.

    If ``available`` is provided, a "Did you mean?" suggestion is
    included when a close match is found (using ``difflib.get_close_matches``).
    """

    code: ErrorCode | None = ErrorCode.UNKNOWN_FILTER

    def __init__(self, name: str, available: Sequence[str] = (), **kwargs: Any):
        self.filter_name = name
        suggestion = None
        if available:
            from difflib import get_close_matches

            matches = get_close_matches(name, list(available), n=1, cutoff=0.6)
            if matches:
                suggestion = f"Did you mean '{matches[0]}'?"
        kwargs.setdefault("suggestion", suggestion)
        super().__init__(f"filter '{name}' not found", **kwargs)


class FilterArgumentError(TemplateRuntimeError):
    """A filter argument could not be converted to the declared type.

    Argument indexes count the piped value as argument 0.

    Example:
            >>> {{ items | double }}
        FilterArgumentError: double(): cannot convert argument 0 from list to int

    Attributes:
        filter_name: Name of the filter being called
        index: Position of the offending argument
        source_type: Type name of the supplied value
        expected_type: Type name the filter declares
    """

    code: ErrorCode | None = ErrorCode.FILTER_ARGUMENT

    def __init__(
        self,
        filter_name: str,
        index: int,
        source_type: str,
        expected_type: str,
        **kwargs: Any,
    ):
        self.filter_name = filter_name
        self.index = index
        self.source_type = source_type
        self.expected_type = expected_type
        super().__init__(
            f"{filter_name}(): cannot convert argument {index} "
            f"from {source_type} to {expected_type}",
            **kwargs,
        )


class FilterArgumentCountError(TemplateRuntimeError):
    """A filter was called with the wrong number of arguments."""

    code: ErrorCode | None = ErrorCode.FILTER_ARGUMENT_COUNT

    def __init__(self, filter_name: str, detail: str, **kwargs: Any):
        self.filter_name = filter_name
        super().__init__(f"{filter_name}(): {detail}", **kwargs)


class RequiredPropError(TemplateRuntimeError):
    """An include site omitted a prop the target declares as required.

    Raised once per include site, before the target template is rendered.

    Example:
            >>> <template include="card.html"></template>
        RequiredPropError: required attribute 'title' not provided for 'card.html'
    """

    code: ErrorCode | None = ErrorCode.REQUIRED_PROP

    def __init__(self, prop: str, target: str, **kwargs: Any):
        self.prop = prop
        self.target = target
        kwargs.setdefault(
            "suggestion", f"Pass {prop}=\"...\" or :{prop}=\"...\" where '{target}' is included"
        )
        super().__init__(
            f"required attribute '{prop}' not provided for '{target}'",
            **kwargs,
        )


class ResourceLimitError(TemplateRuntimeError):
    """A recursion or iteration budget was exceeded.

    Covers include depth (circular includes), layout chain depth and the
    optional per-render loop iteration budget.
    """

    code: ErrorCode | None = ErrorCode.INCLUDE_DEPTH


class ScopeStackError(RuntimeError):
    """The scope stack was popped past its base frame.

    This signals a bug in the renderer, not in a template.
    """
