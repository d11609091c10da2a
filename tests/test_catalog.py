"""Unit tests for navguard.pages.catalog: destination catalog loading and validation."""

from __future__ import annotations

import copy
from pathlib import Path

import pytest

from navguard.config import NavGuardConfigError
from navguard.engine.protocols import Locator, Tier
from navguard.pages.catalog import CatalogError, DestinationCatalog, parse_locator, validate_catalog


# ---------------------------------------------------------------------------
# 1. Locator parsing
# ---------------------------------------------------------------------------

class TestParseLocator:

    @pytest.mark.parametrize("raw", ["//h1", "(//a)[2]", "xpath=//div"])
    def test_xpath_forms(self, raw):
        locator = parse_locator(raw)
        assert locator.is_xpath
        assert locator.selector.startswith("xpath=")

    def test_css_is_default(self):
        assert parse_locator("  .TasksPage_container__r7VvT ") == Locator.css(".TasksPage_container__r7VvT")

    def test_xpath_prefix_is_not_doubled(self):
        assert parse_locator("xpath=//div").selector == "xpath=//div"


# ---------------------------------------------------------------------------
# 2. Loading
# ---------------------------------------------------------------------------

class TestFromDict:
    """DestinationCatalog.from_dict() builds destinations and specs."""

    def test_loads_destinations(self, sample_destinations):
        catalog = DestinationCatalog.from_dict(sample_destinations)
        assert len(catalog) == 2
        assert catalog.names == ["Actions", "Portfolio"]
        assert catalog.home_path == "/tokens/top"
        assert catalog.menu_container == Locator.css("#main-menu")

    def test_builds_verification_spec(self, sample_destinations):
        actions = DestinationCatalog.from_dict(sample_destinations).resolve("Actions")
        spec = actions.spec
        assert spec.url_path_segment == "/tasks"
        assert spec.primary_locator == Locator.xpath("//h1[contains(text(), 'Actions')]")
        assert spec.alternative_locators == (
            Locator.css(".TasksPage_container__r7VvT"),
            Locator.css(".MainTasks_container__LNbdF"),
        )
        assert spec.keywords == ("Actions",)
        assert spec.name == "Actions"

    def test_primary_only_destination(self, sample_destinations):
        portfolio = DestinationCatalog.from_dict(sample_destinations).resolve("portfolio")
        assert portfolio.spec.applicable_tiers()[0] is Tier.PRIMARY_ELEMENT

    def test_null_keys_load_as_empty(self, sample_destinations):
        data = copy.deepcopy(sample_destinations)
        entry = data["destinations"][0]
        entry["aliases"] = None
        entry["menu_label"] = None
        entry["verify"]["alternatives"] = None
        entry["verify"]["keywords"] = None
        data["home_path"] = None
        catalog = DestinationCatalog.from_dict(data)
        actions = catalog.resolve("Actions")
        assert actions.aliases == ()
        assert actions.spec.alternative_locators == ()
        assert actions.spec.effective_keywords == ("Actions",)
        assert catalog.home_path == "/"

    def test_scalar_aliases_raise_catalog_error(self, sample_destinations):
        data = copy.deepcopy(sample_destinations)
        data["destinations"][0]["aliases"] = "Tasks"
        with pytest.raises(CatalogError, match="aliases must be a list of strings"):
            DestinationCatalog.from_dict(data)

    def test_invalid_catalog_raises_catalog_error(self, sample_destinations):
        data = copy.deepcopy(sample_destinations)
        del data["destinations"][0]["verify"]["url_path_segment"]
        del data["destinations"][0]["verify"]["primary"]
        with pytest.raises(CatalogError, match="InvalidSpec"):
            DestinationCatalog.from_dict(data)

    def test_catalog_error_is_a_config_error(self):
        assert issubclass(CatalogError, NavGuardConfigError)

    def test_from_file(self, tmp_project_dir: Path):
        catalog = DestinationCatalog.from_file(tmp_project_dir / "destinations.yaml")
        assert "Actions" in catalog.names

    def test_from_file_missing(self, tmp_path: Path):
        with pytest.raises(CatalogError, match="navguard init"):
            DestinationCatalog.from_file(tmp_path / "nope.yaml")


# ---------------------------------------------------------------------------
# 3. Resolution and menu links
# ---------------------------------------------------------------------------

class TestResolve:

    def test_resolves_by_alias_case_insensitively(self, sample_destinations):
        catalog = DestinationCatalog.from_dict(sample_destinations)
        assert catalog.resolve("tasks").name == "Actions"
        assert catalog.resolve("  ACTIONS ").name == "Actions"

    def test_unknown_destination(self, sample_destinations):
        catalog = DestinationCatalog.from_dict(sample_destinations)
        with pytest.raises(CatalogError) as exc_info:
            catalog.resolve("Rewards")
        assert "Known destinations: Actions, Portfolio" in str(exc_info.value)

    def test_menu_locator_uses_label(self, sample_destinations):
        catalog = DestinationCatalog.from_dict(sample_destinations)
        link = catalog.menu_locator(catalog.resolve("Actions"))
        assert link.selector == "xpath=//a[@data-tooltip-content='Actions']"

    def test_menu_locator_falls_back_to_name(self, sample_destinations):
        catalog = DestinationCatalog.from_dict(sample_destinations)
        link = catalog.menu_locator(catalog.resolve("Portfolio"))
        assert "'Portfolio'" in link.selector


# ---------------------------------------------------------------------------
# 4. validate_catalog()
# ---------------------------------------------------------------------------

def _fields(issues, severity):
    return [i["field"] for i in issues if i["severity"] == severity]


class TestValidateCatalog:
    """validate_catalog() reports issues without launching a browser."""

    def test_sample_is_clean_apart_from_hints(self, sample_destinations):
        issues = validate_catalog(sample_destinations)
        assert _fields(issues, "error") == []
        assert _fields(issues, "warning") == []

    def test_root_must_be_mapping(self):
        assert _fields(validate_catalog(["a"]), "error") == ["root"]

    def test_no_destinations(self):
        assert _fields(validate_catalog({"destinations": []}), "error") == ["destinations"]

    def test_template_needs_label_placeholder(self, sample_destinations):
        data = copy.deepcopy(sample_destinations)
        data["menu"]["link_template"] = "//a[@title='Actions']"
        assert "menu.link_template" in _fields(validate_catalog(data), "error")

    def test_duplicate_alias(self, sample_destinations):
        data = copy.deepcopy(sample_destinations)
        data["destinations"][1]["aliases"] = ["tasks"]
        issues = validate_catalog(data)
        assert any("already used by destination 'Actions'" in i["message"] for i in issues)

    def test_missing_name_and_verify(self):
        data = {"destinations": [{"path": "/a"}, {"name": "B", "path": "/b"}]}
        errors = _fields(validate_catalog(data), "error")
        assert "destinations[0].name" in errors
        assert "destinations[1].verify" in errors

    def test_path_rules(self):
        data = {
            "destinations": [
                {"name": "A", "verify": {"url_path_segment": "/a"}},
                {"name": "B", "path": "b", "verify": {"url_path_segment": "/b"}},
            ]
        }
        issues = validate_catalog(data)
        assert _fields(issues, "warning") == ["destinations[0].path"]
        assert _fields(issues, "error") == ["destinations[1].path"]

    def test_primary_without_expected_text_is_info(self):
        data = {"destinations": [{"name": "A", "path": "/a", "verify": {"primary": "h1"}}]}
        assert _fields(validate_catalog(data), "info") == ["destinations[0].verify.expected_text"]

    def test_alternatives_must_be_a_list(self):
        data = {"destinations": [{"name": "A", "path": "/a", "verify": {"url_path_segment": "/a", "alternatives": ".x"}}]}
        assert "destinations[0].verify.alternatives" in _fields(validate_catalog(data), "error")

    def test_empty_list_keys_are_not_errors(self, sample_destinations):
        data = copy.deepcopy(sample_destinations)
        data["destinations"][0]["aliases"] = None
        data["destinations"][0]["verify"]["alternatives"] = None
        data["destinations"][0]["verify"]["keywords"] = None
        assert _fields(validate_catalog(data), "error") == []

    @pytest.mark.parametrize("key", ["alternatives", "keywords"])
    def test_scalar_verify_list_is_an_error(self, sample_destinations, key):
        data = copy.deepcopy(sample_destinations)
        data["destinations"][0]["verify"][key] = "Actions"
        assert f"destinations[0].verify.{key}" in _fields(validate_catalog(data), "error")

    def test_scalar_aliases_is_an_error(self, sample_destinations):
        data = copy.deepcopy(sample_destinations)
        data["destinations"][0]["aliases"] = "Tasks"
        issues = validate_catalog(data)
        assert _fields(issues, "error") == ["destinations[0].aliases"]

    def test_null_menu_template_uses_default(self, sample_destinations):
        data = copy.deepcopy(sample_destinations)
        data["menu"] = {"container": None, "link_template": None}
        assert _fields(validate_catalog(data), "error") == []
