"""Shared fixtures for the DietSplit test suite."""

import pytest

from dietsplit.audit import AuditLogger
from dietsplit.models.split import DietType, Person
from dietsplit.services.storage import InMemoryHistoryStorage
from dietsplit.session import SplitSession


@pytest.fixture
def omnivore():
    return Person(name="Alice", diet=DietType.OMNIVOROUS)


@pytest.fixture
def vegetarian():
    return Person(name="Bob", diet=DietType.VEGETARIAN)


@pytest.fixture
def vegan():
    return Person(name="Cara", diet=DietType.VEGAN)


@pytest.fixture
def trio(omnivore, vegetarian, vegan):
    """One person of each diet, in a fixed order."""
    return [omnivore, vegetarian, vegan]


@pytest.fixture
def audit_logger():
    return AuditLogger()


@pytest.fixture
def history():
    return InMemoryHistoryStorage()


@pytest.fixture
def session(audit_logger, history):
    return SplitSession(audit_logger=audit_logger, history=history)


@pytest.fixture
def populated_session(session):
    """Session with A (omnivore), B (vegetarian), C (vegan)."""
    session.add_person("A", DietType.OMNIVOROUS)
    session.add_person("B", DietType.VEGETARIAN)
    session.add_person("C", DietType.VEGAN)
    return session
