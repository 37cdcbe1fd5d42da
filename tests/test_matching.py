import pytest

from vsa.matching import (
    MAX_MATCHES,
    CatalogTextMatch,
    LiveCatalogMatch,
    find_best_service_matches,
    get_matcher,
    match_services,
)
from vsa.models import Service


# =============================================================================
# TEXT CATALOG MATCHER
# =============================================================================

class TestCatalogTextMatch:
    def test_firewall_exact_name_scenario(self, firewall_service):
        matches = match_services("I need a firewall setup", [firewall_service])
        assert len(matches) == 1
        match = matches[0]
        assert match.service.id == "svc-1"
        assert match.confidence == 100
        assert "exact-name" in match.matched_keywords
        assert match.matched_keywords == ["exact-name", "firewall", "setup"]

    def test_raw_score_is_uncapped_before_confidence(self, firewall_service):
        score, _ = CatalogTextMatch().score(
            "i need a firewall setup", ["need", "firewall", "setup"], firewall_service
        )
        # exact name + two name tokens + one keyword pair
        assert score == 230

    def test_threshold_is_inclusive(self):
        service = Service(id="p", name="Zebra", description="printer maintenance")
        matches = match_services("printer", [service])
        assert [m.confidence for m in matches] == [20]

    def test_below_threshold_excluded(self):
        service = Service(id="z", name="Zebra")
        assert match_services("printer", [service]) == []

    def test_category_recorded_once(self):
        service = Service(id="c", name="Zebra", category="Cloud Hosting")
        matches = match_services("cloud hosting", [service])
        assert matches[0].confidence == 50
        assert matches[0].matched_keywords == ["category"]

    def test_sku_and_phase_name(self):
        service = Service(id="s", name="Zebra", sku="FW-100", phase_name="Firewall Phase")
        matches = match_services("fw-100 firewall", [service])
        assert matches[0].matched_keywords == ["sku-match", "phase-name"]
        assert matches[0].confidence == 65

    def test_sorted_and_capped(self):
        catalog = [Service(id=f"net-{i}", name=f"Network Service {i}") for i in range(10)]
        catalog.append(Service(id="wifi", name="Wireless Survey", keywords=["network"]))
        matches = match_services("network", catalog)
        assert len(matches) == MAX_MATCHES
        confidences = [m.confidence for m in matches]
        assert confidences == sorted(confidences, reverse=True)
        # ties keep catalog order
        assert [m.service.id for m in matches] == [f"net-{i}" for i in range(8)]

    def test_fallback_catalog(self, fallback_catalog):
        matches = match_services("office 365 migration", fallback_catalog)
        by_id = {m.service.id: m for m in matches}
        assert by_id["local-office365-migration"].confidence == 100
        assert by_id["local-office365-migration"].matched_keywords[0] == "exact-name"
        assert all(0 <= m.confidence <= 100 for m in matches)

    def test_empty_inputs(self, firewall_service):
        assert match_services("", []) == []
        assert match_services("firewall", None) == []


# =============================================================================
# LIVE CATALOG MATCHER
# =============================================================================

class TestLiveCatalogMatch:
    @pytest.fixture
    def live_service(self):
        return Service(
            id="ss-1",
            name="Firewall Deployment",
            description="Deploy and configure perimeter firewall appliances",
            tags=["firewall"],
            service_type="professional_services",
            complexity="Low",
        )

    def test_scoring(self, live_service):
        score, keywords = LiveCatalogMatch().score(
            "deploy a firewall for our office", live_service, "Low", "General"
        )
        # name 40 + shared words 2x10 + tag 15 + tech keyword 25 + complexity 20
        assert score == 120
        assert keywords == ["name", "deploy", "firewall", "complexity"]

    def test_confidence_capped(self, live_service):
        matches = find_best_service_matches("deploy a firewall for our office", [live_service])
        assert matches[0].confidence == 100

    def test_threshold_is_exclusive(self):
        # only the complexity bonus applies: exactly 20
        service = Service(id="z", name="Zebra", complexity="Low")
        assert find_best_service_matches("hello there friend", [service]) == []

    def test_service_type_match(self):
        service = Service(id="t", name="Zebra", service_type="managed_services", complexity="High")
        score, keywords = LiveCatalogMatch().score("we want managed services", service, "Low", "General")
        assert score == 30
        assert keywords == ["service-type"]


def test_get_matcher():
    assert isinstance(get_matcher("text"), CatalogTextMatch)
    assert isinstance(get_matcher("live"), LiveCatalogMatch)
    with pytest.raises(ValueError):
        get_matcher("fuzzy")
