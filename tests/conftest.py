from typing import Any, Dict, List, Optional

import pytest
from fastapi.testclient import TestClient

from backend.app import create_app


class FakeSpendingClient:
    base_url = "https://fake.test/api/v2"

    def __init__(self, results: Optional[List[Dict[str, Any]]] = None, total: int = 0, error: Optional[Exception] = None):
        self.results = results or []
        self.total = total
        self.error = error
        self.calls: List[Any] = []
        self.closed = False

    def search_awards(self, params):
        self.calls.append(params)
        if self.error:
            raise self.error
        return {"results": self.results, "page_metadata": {"total": self.total, "page": params.page, "hasNext": False}}

    def get_spending_over_time(self, params):
        self.calls.append(params)
        if self.error:
            raise self.error
        return {"results": self.results}

    def close(self):
        self.closed = True


@pytest.fixture(autouse=True)
def _log_dir(tmp_path, monkeypatch):
    monkeypatch.setenv("AWARDSCOPE_LOG_DIR", str(tmp_path / "logs"))


@pytest.fixture
def make_client():
    def _make(fake: FakeSpendingClient) -> TestClient:
        return TestClient(create_app(client=fake))

    return _make
