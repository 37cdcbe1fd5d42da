"""Shared fixtures for the scoping-engine tests."""

from unittest.mock import MagicMock

import pytest
import requests

from vsa.catalog import load_fallback_catalog
from vsa.models import Service, ServiceMatch, SubService
from vsa.wbs import BreakdownLibrary


@pytest.fixture
def fallback_catalog():
    return load_fallback_catalog()


@pytest.fixture
def firewall_service():
    return Service(
        id="svc-1",
        name="Firewall Setup",
        keywords=["firewall", "security"],
        estimated_hours=20,
        complexity="Low",
    )


@pytest.fixture
def high_complexity_service():
    """100h High complexity service with no subservices."""
    return Service(
        id="svc-dc",
        name="Datacenter Consolidation",
        description="Consolidate two datacenters",
        estimated_hours=100,
        complexity="High",
    )


@pytest.fixture
def service_with_subservices():
    return Service(
        id="svc-email",
        name="Email Cutover",
        estimated_hours=30,
        complexity="Medium",
        keywords=["email", "migration"],
        subservices=[
            SubService(id="sub-a", name="Mailbox Prep"),
            SubService(id="sub-b", name="Cutover Weekend", estimated_hours=20, resource_type="Specialist"),
        ],
    )


@pytest.fixture
def empty_library():
    return BreakdownLibrary()


@pytest.fixture
def match_for():
    def _match(service, confidence=80):
        return ServiceMatch(service=service, confidence=confidence, matched_keywords=[])
    return _match


def make_response(payload=None, status_code=200, reason="OK"):
    """Mock requests.Response with json() and raise_for_status()."""
    resp = MagicMock(spec=requests.Response)
    resp.status_code = status_code
    resp.reason = reason
    resp.json.return_value = payload if payload is not None else {}
    if status_code >= 400:
        resp.raise_for_status.side_effect = requests.HTTPError(f"{status_code} {reason}", response=resp)
    else:
        resp.raise_for_status.return_value = None
    return resp


@pytest.fixture
def response_factory():
    return make_response
