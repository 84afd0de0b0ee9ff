"""vuepy: Vue-style HTML templates rendered on the server.

Templates are plain HTML annotated with Vue directives. They are rendered
once, on the server, into static HTML; no client-side runtime is involved.

Quickstart:
    >>> from vuepy import Environment
    >>> env = Environment()
    >>> template = env.from_string('<li v-for="n in items">{{ n | upper }}</li>')
    >>> template.render(items=["a", "b"])
    '<li>A</li><li>B</li>'

File-based templates:
    >>> from vuepy import Environment, FileSystemLoader
    >>> env = Environment(loader=FileSystemLoader("templates/"))
    >>> env.render("index.html", page=page, site=site)

Architecture:
Template Source → Front Matter + Markup Parser → Document Tree
    → DirectiveProcessor (ScopeStack + Evaluator + FilterRegistry) → New Tree
    → Serializer → Layout chain → HTML

Pipeline stages:
1. **Front matter**: optional YAML block naming a layout and defaults
2. **Markup parser**: HTML into a tree of ``vuepy.dom`` nodes
3. **Directive processor**: evaluates ``v-if``, ``v-for``, bindings, includes
4. **Serializer**: tree back to HTML, escaping text and attribute values
5. **Layout**: wraps the page output in its layout chain

Undefined Values:
Unbound names and missing properties evaluate to ``None`` and render as
empty text. Unknown filters and failed filter argument conversion are
errors, annotated with the expression, template and inclusion chain:

    >>> env.from_string("{{ items | double }}").render(items=[1])
    Traceback (most recent call last):
    UnknownFilterError: filter 'double' not found

Thread-Safety:
Parsed templates are cached, shared and never mutated. Each render gets
its own RenderContext. Register filters before rendering starts.

"""

from vuepy.environment import (
    ChoiceLoader,
    DictLoader,
    Environment,
    ErrorCode,
    FileSystemLoader,
    FilterArgumentCountError,
    FilterArgumentError,
    FilterRegistry,
    RequiredPropError,
    ResourceLimitError,
    ScopeStackError,
    TemplateError,
    TemplateNotFoundError,
    TemplateRuntimeError,
    TemplateSyntaxError,
    UnknownFilterError,
    register_filter,
)
from vuepy.parser import ParseError, parse_expression, parse_loop, parse_markup
from vuepy.render_context import (
    RenderContext,
    get_render_context,
    get_render_context_required,
    render_context,
)
from vuepy.template import (
    DirectiveProcessor,
    Evaluator,
    Markup,
    ScopeStack,
    Template,
    evaluate,
    is_truthy,
    render,
)
from vuepy.utils.html import html_escape

__version__ = "0.1.0"

__all__ = [
    "ChoiceLoader",
    "DictLoader",
    "DirectiveProcessor",
    "Environment",
    "ErrorCode",
    "Evaluator",
    "FileSystemLoader",
    "FilterArgumentCountError",
    "FilterArgumentError",
    "FilterRegistry",
    "Markup",
    "ParseError",
    "RenderContext",
    "RequiredPropError",
    "ResourceLimitError",
    "ScopeStack",
    "ScopeStackError",
    "Template",
    "TemplateError",
    "TemplateNotFoundError",
    "TemplateRuntimeError",
    "TemplateSyntaxError",
    "UnknownFilterError",
    "__version__",
    "evaluate",
    "get_render_context",
    "get_render_context_required",
    "html_escape",
    "is_truthy",
    "parse_expression",
    "parse_loop",
    "parse_markup",
    "register_filter",
    "render",
    "render_context",
]
