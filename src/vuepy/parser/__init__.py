"""vuepy parsers.

- ``parse_expression``: expression source → immutable ``vuepy.nodes`` AST
- ``parse_loop``: ``v-for`` header → ``LoopSpec``
- ``parse_markup``: HTML source → ``vuepy.dom`` tree
- ``split_front_matter``: YAML front matter → (mapping, body)
"""

from vuepy.parser.errors import ParseError
from vuepy.parser.expressions import ExpressionParser, LoopSpec, parse_expression, parse_loop
from vuepy.parser.frontmatter import split_front_matter
from vuepy.parser.lexer import tokenize
from vuepy.parser.markup import parse_markup

__all__ = [
    "ExpressionParser",
    "LoopSpec",
    "ParseError",
    "parse_expression",
    "parse_loop",
    "parse_markup",
    "split_front_matter",
    "tokenize",
]
