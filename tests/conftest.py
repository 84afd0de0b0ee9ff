"""Pytest configuration and fixtures for vuepy tests."""

import pytest

from vuepy import DictLoader, Environment
from vuepy.environment import terminal


@pytest.fixture(autouse=True)
def _plain_terminal():
    """Disable ANSI colours so diagnostics compare as plain text."""
    terminal.set_color_enabled(False)
    yield
    terminal.set_color_enabled(None)


@pytest.fixture
def env():
    """Create a basic vuepy Environment with no loader."""
    return Environment()


@pytest.fixture
def env_with_loader():
    """Create a vuepy Environment with a DictLoader and test templates."""
    loader = DictLoader(
        {
            "card.html": (
                '<template :required="title">'
                '<div class="card"><h2>{{ title }}</h2><slot>No body</slot></div>'
                "</template>"
            ),
            "badge.html": '<span class="badge">{{ label | default("new") }}</span>',
            "list.html": (
                '<ul><li v-for="item in items"><slot name="row" :item="item">'
                "{{ item }}</slot></li></ul>"
            ),
            "page.html": (
                '<main><template include="card.html" title="Hello">'
                "<p>Body</p></template></main>"
            ),
        }
    )
    return Environment(loader=loader)


def assert_template_equal(template_result: str, expected: str) -> None:
    """Assert template result equals expected, normalizing whitespace.

    Args:
        template_result: The actual template rendering result.
        expected: The expected output.
    """
    actual_normalized = " ".join(template_result.split())
    expected_normalized = " ".join(expected.split())
    assert actual_normalized == expected_normalized, (
        f"Template output mismatch:\n"
        f"  Actual: {actual_normalized!r}\n"
        f"  Expected: {expected_normalized!r}"
    )


def assert_contains(template_result: str, *expected_parts: str) -> None:
    """Assert template result contains all expected parts.

    Args:
        template_result: The actual template rendering result.
        expected_parts: Strings that should all be present in the result.
    """
    for part in expected_parts:
        assert part in template_result, (
            f"Template output missing expected content:\n"
            f"  Missing: {part!r}\n"
            f"  Actual: {template_result!r}"
        )
