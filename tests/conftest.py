"""
Pytest configuration and shared fixtures.
"""

import pytest
import json
from pathlib import Path
from typing import Any, Dict, List

from companydir.errors import StorageAccessError
from companydir.logger import get_logger, reset_logger
from companydir.services import CompanyServices
from companydir.storage import MemoryStore


class FlakyStore(MemoryStore):
    """MemoryStore whose reads or writes can be switched to fail."""

    def __init__(self, initial=None):
        super().__init__(initial)
        self.fail_reads = False
        self.fail_writes_for = set()

    def get_item(self, key):
        if self.fail_reads:
            raise StorageAccessError("read refused", key=key)
        return super().get_item(key)

    def set_item(self, key, value):
        if key in self.fail_writes_for or "*" in self.fail_writes_for:
            raise StorageAccessError("quota exceeded", key=key)
        super().set_item(key, value)


@pytest.fixture(autouse=True)
def quiet_logger():
    """Fresh global logger per test with no console or file output."""
    reset_logger()
    logger = get_logger(enable_console=False, enable_file=False)
    yield logger
    reset_logger()


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def services(store, quiet_logger) -> CompanyServices:
    return CompanyServices.over(store, logger=quiet_logger)


@pytest.fixture
def flaky_store() -> FlakyStore:
    return FlakyStore()


@pytest.fixture
def flaky_services(flaky_store, quiet_logger) -> CompanyServices:
    return CompanyServices.over(flaky_store, logger=quiet_logger)


@pytest.fixture
def acme(services) -> str:
    """An existing company record named Acme."""
    services.directory.upsert("Acme", {"biography": "Rockets and anvils"})
    return "Acme"


@pytest.fixture
def sample_postings() -> List[Dict[str, Any]]:
    """Job and event postings as handed over by the jobs feed."""
    return [
        {
            "id": "job-1",
            "company": "Acme",
            "location": "Phoenix, AZ",
            "salary": {"min": 60000, "max": 80000},
            "isEvent": False,
        },
        {
            "id": "job-2",
            "company": "Acme",
            "location": "Remote",
            "salary": {"min": 90000, "max": 110001},
            "isEvent": False,
        },
        {
            "id": "event-1",
            "company": "Acme",
            "location": "Phoenix, AZ",
            "salary": {"min": 0, "max": 0},
            "isEvent": True,
        },
        {
            "id": "job-3",
            "company": "Globex",
            "location": "Springfield",
            "salary": {"min": 50000, "max": 70000},
            "isEvent": False,
        },
    ]


@pytest.fixture
def postings_file(tmp_path, sample_postings) -> Path:
    path = tmp_path / "postings.json"
    path.write_text(json.dumps(sample_postings))
    return path
