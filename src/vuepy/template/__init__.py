"""vuepy Template package: rendering of parsed document trees.

- ``ScopeStack``: variable bindings with shadowing
- ``Evaluator`` / ``evaluate``: expression evaluation
- ``DirectiveProcessor``: the tree walk (``v-if``, ``v-for``, bindings, ...)
- ``render``: render a tree against a data context
- ``Template``: parsed template bound to an Environment

"""

from vuepy.template.core import Template, render
from vuepy.template.directives import DirectiveProcessor
from vuepy.template.evaluator import Evaluator, evaluate
from vuepy.template.helpers import is_truthy, stringify
from vuepy.template.scope import ScopeStack
from vuepy.utils.html import Markup

__all__ = [
    "DirectiveProcessor",
    "Evaluator",
    "Markup",
    "ScopeStack",
    "Template",
    "evaluate",
    "is_truthy",
    "render",
    "stringify",
]
