import sys
from pathlib import Path

# Ensure the `extratorzap` package is importable when running pytest from the repo root.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import pytest

from extratorzap.errors import BusinessLookupError
from extratorzap.lookup.business_lookup import BusinessLookup, BusinessRecord


class StubLookup(BusinessLookup):
    """Deterministic lookup that records every call"""

    def __init__(self, records=None, error=None):
        self.records = list(records or [])
        self.error = error
        self.calls = []

    def lookup(self, criteria):
        self.calls.append(criteria)
        if self.error:
            raise self.error
        return list(self.records)


class FakeResponse:
    def __init__(self, text):
        self.text = text


class FakeModels:
    def __init__(self, text=None, error=None):
        self.text = text
        self.error = error
        self.calls = []

    def generate_content(self, **kwargs):
        self.calls.append(kwargs)
        if self.error:
            raise self.error
        return FakeResponse(self.text)


class FakeGenaiClient:
    """Stands in for google.genai.Client; only ``models.generate_content`` is used"""

    def __init__(self, text=None, error=None):
        self.models = FakeModels(text=text, error=error)


@pytest.fixture
def sample_records():
    return [
        BusinessRecord(name="Padaria Pão Quente", contact_number="+55 11 91111-2222", website_status="Não Tem Site"),
        BusinessRecord(name="Pet Shop Cão Feliz", contact_number="", website_status="Site Ruim"),
    ]


@pytest.fixture
def stub_lookup(sample_records):
    return StubLookup(sample_records)


@pytest.fixture
def failing_lookup():
    return StubLookup(error=BusinessLookupError("Failed to fetch businesses. Check your API key and connection."))


@pytest.fixture
def app_module(monkeypatch, stub_lookup):
    from extratorzap.ui import app as app_module

    monkeypatch.setattr(app_module, "business_lookup", stub_lookup)
    monkeypatch.setattr(app_module, "session_data", {})
    return app_module


@pytest.fixture
def client(app_module):
    app_module.app.config["TESTING"] = True
    return app_module.app.test_client()
