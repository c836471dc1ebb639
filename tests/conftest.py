"""Pytest configuration and fixtures for test suite."""

import os
import sys
from pathlib import Path
from typing import Callable, List

import httpx
import pytest

# Set test environment BEFORE any other imports
os.environ.setdefault("APP_ENVIRONMENT", "test")
os.environ.setdefault("SUPABASE_PROJECT_ID", "testproject")
os.environ.setdefault("SUPABASE_ANON_KEY", "test-anon-key")

# Add src to path for imports
src_path = Path(__file__).parent.parent / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from auth.supabase_auth import StaticTokenProvider  # noqa: E402
from config.route_catalog_loader import RouteCatalogLoader  # noqa: E402
from config.settings import SupabaseSettings  # noqa: E402
from eligibility.assessment_client import AssessmentSubmitter  # noqa: E402
from eligibility.catalog import VisaRoute  # noqa: E402
from tests.helpers.builders import TEST_TOKEN, boolean_question, make_route  # noqa: E402


@pytest.fixture
def supabase_settings() -> SupabaseSettings:
    return SupabaseSettings(project_id="testproject", anon_key="test-anon-key")


@pytest.fixture
def three_question_route() -> VisaRoute:
    """Three unconditional required boolean questions weighted 10, 5 and 8."""
    return make_route([
        boolean_question("q1", weight=10),
        boolean_question("q2", weight=5),
        boolean_question("q3", weight=8),
    ])


@pytest.fixture(scope="session")
def catalog():
    """The bundled route catalog."""
    return RouteCatalogLoader().load_catalog()


@pytest.fixture
def global_talent(catalog) -> VisaRoute:
    return catalog.get("global-talent")


@pytest.fixture
def skilled_worker(catalog) -> VisaRoute:
    return catalog.get("skilled-worker")


@pytest.fixture
def make_submitter(supabase_settings) -> Callable:
    """
    Factory for submitters backed by ``httpx.MockTransport``.

    Usage:
        submitter, calls = make_submitter(lambda request: httpx.Response(200, json=...))
    """

    def _make(handler: Callable[[httpx.Request], httpx.Response], token: str = TEST_TOKEN):
        calls: List[httpx.Request] = []

        def _recording(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return handler(request)

        client = httpx.AsyncClient(transport=httpx.MockTransport(_recording))
        submitter = AssessmentSubmitter(StaticTokenProvider(token), settings=supabase_settings, client=client)
        return submitter, calls

    return _make
