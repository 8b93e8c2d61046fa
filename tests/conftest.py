"""Pytest configuration and shared fixtures for the mdxbridge test suite.

This module provides shared fixtures, test configuration, and utilities
that are used across the entire test suite.
"""

import os
from pathlib import Path

import pytest
from hypothesis import HealthCheck, Phase, Verbosity, settings

from mdxbridge.ast import (
    code_block,
    emphasis,
    heading,
    image,
    inline_code,
    link,
    list_item,
    list_node,
    paragraph,
    quote,
    root,
    strong,
    thematic_break,
)
from mdxbridge.frontmatter import FrontmatterEntry
from mdxbridge.storage import LocalFileStorage

# Register custom Hypothesis profiles
settings.register_profile("ci", max_examples=200, verbosity=Verbosity.verbose, deadline=None)
settings.register_profile("dev", max_examples=50, deadline=None, suppress_health_check=[HealthCheck.too_slow])
settings.register_profile(
    "debug", max_examples=10, verbosity=Verbosity.verbose, phases=[Phase.explicit, Phase.reuse, Phase.generate]
)
settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "dev"))

FIXTURES_DIR = Path(__file__).parent / "fixtures"


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests - fast, isolated component tests")
    config.addinivalue_line("markers", "integration: Integration tests - component interaction tests")
    config.addinivalue_line("markers", "golden: Golden file tests - exact output comparisons")
    config.addinivalue_line("markers", "fuzzing: Property-based tests driven by Hypothesis")
    config.addinivalue_line("markers", "cli: Tests related to command-line interface")


@pytest.fixture
def fixtures_dir() -> Path:
    """Directory holding test fixture files."""
    return FIXTURES_DIR


@pytest.fixture
def storage(tmp_path) -> LocalFileStorage:
    """Local file storage rooted in a fresh temporary directory."""
    return LocalFileStorage(tmp_path)


@pytest.fixture
def sample_entries() -> list[FrontmatterEntry]:
    """Front matter entries mixing text, numbers and flow lists."""
    return [
        FrontmatterEntry("title", "Getting Started"),
        FrontmatterEntry("draft", "false"),
        FrontmatterEntry("order", "3"),
        FrontmatterEntry("tags", "[guide, basics]"),
    ]


@pytest.fixture
def sample_document():
    """A document exercising every built-in node type.

    Serializes to ``tests/fixtures/golden/basic.md`` (without its header).
    """
    return root(
        heading(1, "Getting Started"),
        paragraph(
            "Welcome to the ",
            strong("guide"),
            ". It covers ",
            emphasis("emphasis"),
            ", ",
            inline_code("inline code"),
            " and ",
            link("https://example.com", "links", title="Example"),
            ".",
        ),
        heading(2, "Lists"),
        list_node(
            "bullet",
            list_item("First item"),
            list_item("Second item", list_node("bullet", list_item("Nested item"))),
            list_item("Third item"),
        ),
        list_node("number", list_item("One"), list_item("Two")),
        list_node("check", list_item("Done", checked=True), list_item("Todo", checked=False)),
        quote("Quoted text\ncontinues here"),
        code_block('def hello():\n    return "world"', "python"),
        thematic_break(),
        paragraph(image("images/logo.png", alt="Logo")),
    )
