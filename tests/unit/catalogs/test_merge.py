"""Tests for field-authority merging."""

from starmap.catalogs.merge import fill_missing, merge_model
from starmap.catalogs.types import Model, ModelFeatures, ModelLimits, ModelMetadata


def test_fill_missing_only_fills_empty_fields():
    target = Model(id="m", name="Live", limits=ModelLimits(context_window=8000))
    source = Model(
        id="m",
        name="Other",
        description="From fallback",
        limits=ModelLimits(context_window=1, output_tokens=2048),
    )

    assert fill_missing(target, source)
    assert target.name == "Live"
    assert target.description == "From fallback"
    assert target.limits.context_window == 8000
    assert target.limits.output_tokens == 2048


def test_fill_missing_reports_no_change():
    target = Model(id="m", name="Live", description="d")
    assert not fill_missing(target, Model(id="m", name="x", description="y"))


def test_fill_missing_ignores_empty_nested_source():
    target = Model(id="m")
    assert not fill_missing(target, Model(id="m", features=ModelFeatures()))
    assert target.features is None


def test_fill_missing_keeps_explicit_false():
    target = Model(id="m", features=ModelFeatures(tools=False))
    fill_missing(target, Model(id="m", features=ModelFeatures(tools=True, reasoning=True)))
    assert target.features.tools is False
    assert target.features.reasoning is True


def test_merge_model_treats_id_as_placeholder_name():
    primary = Model(id="gpt-x", name="gpt-x")
    merged, changed = merge_model(primary, Model(id="gpt-x", name="GPT X"))
    assert changed
    assert merged.name == "GPT X"
    assert primary.name == "gpt-x"


def test_merge_model_does_not_share_nested_objects():
    fallback = Model(id="m", metadata=ModelMetadata(release_date="2024-01-01"))
    merged, _ = merge_model(Model(id="m"), fallback)
    merged.metadata.release_date = "1999-01-01"
    assert fallback.metadata.release_date == "2024-01-01"
