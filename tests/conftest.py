"""Pytest configuration and shared fixtures for registration processor tests."""

from collections.abc import Callable
from typing import Any

import pytest

from language_registration.config import DEFAULT_BASE_TYPE
from language_registration.diagnostics import CollectingMessager
from language_registration.models import (
    CandidateDeclaration,
    ConstructorFacts,
    Modifier,
    RegistrationMetadata,
)
from language_registration.sinks import InMemoryResourceSink

CandidateFactory = Callable[..., CandidateDeclaration]


def pytest_configure(config: pytest.Config) -> None:
    """Configure custom markers."""
    config.addinivalue_line(
        "markers",
        "integration: marks tests that exercise the full source-to-resource pipeline",
    )


class StubTypeResolver:
    """TypeResolver that knows a fixed set of subtypes of the base type."""

    def __init__(self, subtypes: set[str] | None = None) -> None:
        self.subtypes = set(subtypes or ())

    def is_assignable(self, type_name: str, base_type: str) -> bool:
        return type_name == base_type or (
            base_type == DEFAULT_BASE_TYPE and type_name in self.subtypes
        )


@pytest.fixture
def messager() -> CollectingMessager:
    return CollectingMessager()


@pytest.fixture
def sink() -> InMemoryResourceSink:
    return InMemoryResourceSink()


@pytest.fixture
def type_resolver() -> StubTypeResolver:
    """Resolver where every candidate made by ``make_candidate`` is a subtype."""
    return StubTypeResolver()


@pytest.fixture
def make_candidate(type_resolver: StubTypeResolver) -> CandidateFactory:
    """Factory for valid registration candidates.

    The produced candidate is a public top-level class with a public
    no-argument constructor and registration metadata, and is registered
    as a subtype of the base type with ``type_resolver``. Keyword arguments
    override any model field.
    """

    def _make(name: str = "com.example.SimpleLanguage", **overrides: Any) -> CandidateDeclaration:
        values: dict[str, Any] = {
            "qualified_name": name,
            "binary_name": name,
            "modifiers": frozenset({Modifier.PUBLIC}),
            "constructors": (ConstructorFacts(modifiers=frozenset({Modifier.PUBLIC})),),
            "registration": RegistrationMetadata(
                name=name.rsplit(".", 1)[-1],
                version="1.0",
                mime_types=("application/x-simple",),
            ),
        }
        values.update(overrides)
        candidate = CandidateDeclaration(**values)
        type_resolver.subtypes.add(candidate.qualified_name)
        return candidate

    return _make
