"""Tests for extraction profiles and the active-profile manager."""

from decimal import Decimal

import pytest

from fakturex.config.profile_loader import (
    MAX_WORKERS_ENV,
    ExtractionProfile,
    get_default_profile,
    get_profiles_dir,
    list_available_profiles,
    load_profile,
)
from fakturex.config.profile_manager import get_profile, reset_profile, set_profile


class TestExtractionProfile:
    def test_defaults(self):
        profile = ExtractionProfile(name="test")
        assert profile.amount_tolerance == Decimal("0.01")
        assert profile.label_factor == 1.0
        assert profile.positional_factor == 0.7
        assert profile.zones["header_zone"] == 0.4

    def test_from_dict_merges_defaults(self):
        profile = ExtractionProfile.from_dict({"name": "custom", "layout": {"word_gap": 8.0}})
        assert profile.name == "custom"
        assert profile.layout["word_gap"] == 8.0
        assert profile.layout["line_overlap_ratio"] == 0.5
        assert profile.weights["summary_totals"] == 0.35

    def test_to_dict_round_trip(self):
        profile = ExtractionProfile.from_dict({"name": "custom", "penalties": {"inconsistent_bucket": 0.5}})
        assert ExtractionProfile.from_dict(profile.to_dict()) == profile

    def test_rejects_negative_weight(self):
        with pytest.raises(ValueError, match="weight"):
            ExtractionProfile.from_dict({"weights": {"header": -0.1}})

    def test_rejects_all_zero_weights(self):
        zero = {"header": 0, "issuer_identifier": 0, "summary_totals": 0, "receiver": 0}
        with pytest.raises(ValueError, match="positive"):
            ExtractionProfile.from_dict({"weights": zero})

    def test_rejects_factor_out_of_range(self):
        with pytest.raises(ValueError, match="factor"):
            ExtractionProfile.from_dict({"rule_factors": {"positional": 1.5}})


class TestMaxWorkers:
    def test_env_override(self, monkeypatch):
        monkeypatch.setenv(MAX_WORKERS_ENV, "3")
        profile = ExtractionProfile.from_dict({"batch": {"max_workers": 8}})
        assert profile.max_workers() == 3

    def test_profile_setting(self, monkeypatch):
        monkeypatch.delenv(MAX_WORKERS_ENV, raising=False)
        assert ExtractionProfile.from_dict({"batch": {"max_workers": 2}}).max_workers() == 2

    def test_cpu_count_fallback(self, monkeypatch):
        monkeypatch.delenv(MAX_WORKERS_ENV, raising=False)
        monkeypatch.setattr("fakturex.config.profile_loader.os.cpu_count", lambda: 6)
        assert ExtractionProfile(name="test").max_workers() == 6

    def test_invalid_env(self, monkeypatch):
        monkeypatch.setenv(MAX_WORKERS_ENV, "many")
        with pytest.raises(ValueError, match=MAX_WORKERS_ENV):
            ExtractionProfile(name="test").max_workers()


class TestLoadProfile:
    def test_bundled_profiles(self):
        assert get_profiles_dir().name == "profiles"
        assert {"default", "scanned"} <= set(list_available_profiles())

    def test_load_default(self):
        profile = load_profile("default")
        assert profile.name == "default"
        assert profile.to_dict() == get_default_profile().to_dict()
        assert profile.batch["continue_on_error"] is True

    def test_load_scanned_overrides(self):
        profile = load_profile("scanned")
        assert profile.layout["line_overlap_ratio"] == 0.4
        assert profile.layout["word_gap"] == 5.0

    def test_load_from_path(self, tmp_path):
        path = tmp_path / "strict.yaml"
        path.write_text("name: strict\ntolerances:\n  amount: 0.0\n", encoding="utf-8")
        profile = load_profile(str(path))
        assert profile.name == "strict"
        assert profile.amount_tolerance == Decimal("0.0")

    def test_missing_profile(self):
        with pytest.raises(FileNotFoundError):
            load_profile("does-not-exist")

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "broken.yaml"
        path.write_text("weights: [unclosed\n", encoding="utf-8")
        with pytest.raises(ValueError, match="Invalid YAML"):
            load_profile(str(path))

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("", encoding="utf-8")
        with pytest.raises(ValueError, match="empty"):
            load_profile(str(path))

    def test_non_mapping(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(ValueError, match="mapping"):
            load_profile(str(path))


class TestProfileManager:
    def test_set_and_reset(self):
        assert set_profile("scanned").name == "scanned"
        assert get_profile().name == "scanned"
        reset_profile()
        assert get_profile().name == "default"

    def test_set_unknown_profile(self):
        with pytest.raises(FileNotFoundError):
            set_profile("nope")
