"""vuepy Environment package.

- ``Environment``: loader, filter registry, component table, template cache
- loaders: ``FileSystemLoader``, ``DictLoader``, ``ChoiceLoader``
- ``FilterRegistry`` and the process-wide ``register_filter``
- the ``TemplateError`` exception hierarchy

"""

from vuepy.environment.core import Environment
from vuepy.environment.exceptions import (
    ErrorCode,
    FilterArgumentCountError,
    FilterArgumentError,
    RequiredPropError,
    ResourceLimitError,
    ScopeStackError,
    TemplateError,
    TemplateNotFoundError,
    TemplateRuntimeError,
    TemplateSyntaxError,
    UnknownFilterError,
)
from vuepy.environment.loaders import ChoiceLoader, DictLoader, FileSystemLoader, Loader
from vuepy.environment.registry import (
    FilterRegistry,
    coerce_argument,
    default_registry,
    register_filter,
)

__all__ = [
    "ChoiceLoader",
    "DictLoader",
    "Environment",
    "ErrorCode",
    "FileSystemLoader",
    "FilterArgumentCountError",
    "FilterArgumentError",
    "FilterRegistry",
    "Loader",
    "RequiredPropError",
    "ResourceLimitError",
    "ScopeStackError",
    "TemplateError",
    "TemplateNotFoundError",
    "TemplateRuntimeError",
    "TemplateSyntaxError",
    "UnknownFilterError",
    "coerce_argument",
    "default_registry",
    "register_filter",
]
