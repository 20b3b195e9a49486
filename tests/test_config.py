"""
Unit tests for configuration objects and lookup tables.
"""

import pytest

from boondh_core.config import (
    DEFAULT_AREA_SQFT,
    RainfallSample,
    RooftopSpec,
    RoofMaterial,
    RunConfig,
    build_config,
    default_tables,
)


class TestRoofMaterial:
    """Free-text material parsing."""

    @pytest.mark.parametrize("text,expected", [
        ("metal", RoofMaterial.METAL),
        ("  Concrete ", RoofMaterial.CONCRETE),
        ("THATCHED", RoofMaterial.THATCHED),
        ("slate", RoofMaterial.OTHER),
        ("", RoofMaterial.OTHER),
        (None, RoofMaterial.OTHER),
    ])
    def test_parse(self, text, expected):
        assert RoofMaterial.parse(text) is expected

    def test_parse_member_passthrough(self):
        assert RoofMaterial.parse(RoofMaterial.TILE) is RoofMaterial.TILE

    def test_rooftop_coerces_string_material(self):
        assert RooftopSpec(1200, "metal").material is RoofMaterial.METAL
        assert RooftopSpec(1200, "slate").material is RoofMaterial.OTHER


class TestRooftopArea:
    """Effective area and the explicit area-source tag."""

    def test_direct_area(self):
        assert RooftopSpec.direct(1200, "metal").effective_area_sqft == 1200.0

    def test_dimensions(self):
        spec = RooftopSpec.from_dimensions(40, 25, "tile")
        assert spec.area_source == "derived"
        assert spec.effective_area_sqft == 1000.0

    def test_last_edit_wins_dimensions(self):
        spec = RooftopSpec.direct(1500).with_dimensions(30, 20)
        assert spec.effective_area_sqft == 600.0

    def test_last_edit_wins_direct(self):
        spec = RooftopSpec.from_dimensions(30, 20).with_area(1500)
        assert spec.area_source == "direct"
        assert spec.effective_area_sqft == 1500.0

    def test_derived_tag_without_dimensions_uses_area(self):
        spec = RooftopSpec(area_sqft=800.0, area_source="derived")
        assert spec.effective_area_sqft == 800.0

    @pytest.mark.parametrize("bad", [None, 0, -50, "abc", float("nan")])
    def test_invalid_area_defaults(self, bad):
        assert RooftopSpec.direct(bad).effective_area_sqft == DEFAULT_AREA_SQFT

    def test_string_area_is_parsed(self):
        assert RooftopSpec.direct("1250.5").effective_area_sqft == 1250.5


class TestTables:
    """Shipped lookup tables are read-only."""

    def test_default_location_is_delhi(self):
        t = default_tables()
        assert t.default_location.latitude == pytest.approx(28.7041)
        assert t.default_location.longitude == pytest.approx(77.1025)

    def test_tables_are_immutable(self):
        t = default_tables()
        with pytest.raises(TypeError):
            t.coordinates["Atlantis"] = t.default_location

    def test_every_city_has_seasonal_pair(self):
        t = default_tables()
        assert set(t.coordinates) == set(t.seasonal)


class TestRainfallSample:

    def test_annual_is_twelve_months(self):
        assert RainfallSample(2.5, "live").annual_inches == 30.0


class TestBuildConfig:
    """Convenience constructor."""

    def test_defaults_and_folders(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("BOONDH_CACHE_DIR", str(tmp_path / "wx"))
        cfg = build_config(city="  Pune ")
        assert isinstance(cfg, RunConfig)
        assert cfg.city == "Pune"
        assert (tmp_path / "wx").is_dir()
        assert (tmp_path / "reports").is_dir()

    def test_invalid_override_ignored(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        assert build_config(setup_cost_override=0).setup_cost_override is None
        assert build_config(setup_cost_override=-5).setup_cost_override is None
        assert build_config(setup_cost_override=50000).setup_cost_override == 50000.0

    def test_weather_url_from_env(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("BOONDH_WEATHER_URL", "http://localhost:9999/v1/forecast")
        assert build_config().weather_url == "http://localhost:9999/v1/forecast"
