"""Shared fixtures for the functional suite.

Every test gets a freshly seeded in-memory store; API tests wrap it in an
app built by the real factory and drive it through ``TestClient``.
"""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from retail_audit.config import AppConfig
from retail_audit.logic.presets import demo_templates, seed_demo_data
from retail_audit.main import create_app
from retail_audit.models.template import Template
from retail_audit.storage.memory import InMemoryStorage


@pytest.fixture
def storage() -> InMemoryStorage:
    store = InMemoryStorage()
    seed_demo_data(store)
    return store


@pytest.fixture
def execution_template() -> Template:
    """The seeded 'Retail Execution Audit' built from the retail presets."""
    return Template.model_validate(demo_templates()[1])


@pytest.fixture
def client(storage):
    app = create_app(config=AppConfig(), storage=storage)
    with TestClient(app) as c:
        yield c
