"""Tests for SyncOptions validation and SyncResult aggregation."""

import pytest

from starmap.core.exceptions import ConfigurationError, ProviderAPIError
from starmap.sync import ProviderResult, SyncOptions, SyncResult, fresh_changeset


class TestSyncOptions:
    def test_defaults(self):
        options = SyncOptions()
        assert options.output_dir == "./catalog/providers"
        assert options.timeout == 30.0
        assert options.concurrency == 5
        assert options.enrich is True
        options.validate()

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"concurrency": 0},
            {"timeout": 0},
            {"timeout": -1.5},
            {"output_dir": ""},
            {"provider": "  "},
        ],
    )
    def test_invalid_values(self, kwargs):
        with pytest.raises(ConfigurationError):
            SyncOptions(**kwargs).validate()


class TestSyncResult:
    def _result(self, make_model):
        ok = ProviderResult("acme", api_models_count=2)
        ok.record_changeset(fresh_changeset("acme", [make_model("a"), make_model("b")]))
        quiet = ProviderResult("quiet")
        quiet.record_changeset(fresh_changeset("quiet", []))
        failed = ProviderResult("broken", error=ProviderAPIError("down"))
        return SyncResult(
            provider_results={"acme": ok, "quiet": quiet, "broken": failed},
            output_dir="/tmp/out",
        )

    def test_aggregates(self, make_model):
        result = self._result(make_model)
        assert result.total_changes == 2
        assert result.providers_changed == 1
        assert result.has_changes()
        assert list(result.errors) == ["broken"]
        assert [cs.provider_id for cs in result.changesets()] == ["acme"]

    def test_statuses(self, make_model):
        results = self._result(make_model).provider_results
        assert results["acme"].status == "changed"
        assert results["quiet"].status == "unchanged"
        assert results["broken"].status == "error"
        assert results["broken"].failed

    def test_summary(self, make_model):
        result = self._result(make_model)
        assert result.summary() == "3 providers, 1 changed, 2 added, 0 updated, 0 removed, 1 failed"
        result.dry_run = True
        assert result.summary().startswith("[dry run] ")

    def test_skipped_providers_are_not_failures(self, make_model):
        result = self._result(make_model)
        result.provider_results["keyless"] = ProviderResult("keyless", skipped_reason="ACME_API_KEY is not set")

        assert result.provider_results["keyless"].status == "skipped"
        assert list(result.errors) == ["broken"]
        assert result.skipped == {"keyless": "ACME_API_KEY is not set"}
        assert result.summary().endswith(", 1 failed, 1 skipped")

    def test_empty_result(self):
        result = SyncResult()
        assert not result.has_changes()
        assert result.errors == {}
        assert result.skipped == {}
        assert result.changesets() == []
