"""Shared utilities for vuepy."""

from vuepy.utils.html import Markup, escape_attribute, escape_text, html_escape

__all__ = ["Markup", "escape_attribute", "escape_text", "html_escape"]
