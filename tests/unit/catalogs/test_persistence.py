"""Tests for per-model YAML persistence."""

import os

import pytest
import yaml

from starmap.catalogs.catalog import Catalog
from starmap.catalogs.persistence import (
    apply_changeset,
    clean_provider_directory,
    delete_model,
    dump_model_yaml,
    get_provider_models,
    load_provider_models,
    model_path,
    read_model_file,
    save_model,
)
from starmap.catalogs.types import Model, ModelLimits
from starmap.core.exceptions import CatalogLoadError, PersistenceError
from starmap.sync.changeset import compare_provider_models


class TestModelPath:
    def test_flat_id(self, tmp_path):
        assert model_path(tmp_path, "acme", "a") == tmp_path / "acme" / "a.yaml"

    def test_nested_id(self, tmp_path):
        path = model_path(tmp_path, "groq", "meta-llama/llama-3")
        assert path == tmp_path / "groq" / "meta-llama" / "llama-3.yaml"

    @pytest.mark.parametrize("model_id", ["../escape", "a/../../b", "/etc/passwd", "a//b", "."])
    def test_unsafe_ids_rejected(self, tmp_path, model_id):
        with pytest.raises(PersistenceError):
            model_path(tmp_path, "acme", model_id)

    def test_unsafe_provider_rejected(self, tmp_path):
        with pytest.raises(PersistenceError):
            model_path(tmp_path, "..", "a")


def test_dump_model_yaml_has_header_and_is_parseable():
    model = Model(id="gpt-4o", name="GPT-4o", limits=ModelLimits(context_window=128000))
    text = dump_model_yaml(model)
    assert text.splitlines()[0] == "# gpt-4o - GPT-4o"
    assert yaml.safe_load(text) == {
        "id": "gpt-4o",
        "name": "GPT-4o",
        "limits": {"context_window": 128000},
    }


def test_dump_model_yaml_keeps_unicode():
    text = dump_model_yaml(Model(id="m", name="Modèle"))
    assert "Modèle" in text


def test_save_and_load(tmp_path):
    save_model(tmp_path, "acme", Model(id="a", name="A"))
    save_model(tmp_path, "acme", Model(id="org/b", name="B"))

    models = load_provider_models(tmp_path, "acme")

    assert sorted(models) == ["a", "org/b"]
    assert models["org/b"].name == "B"
    assert not [p for p in (tmp_path / "acme").iterdir() if p.name.startswith(".tmp-")]


def test_load_missing_directory(tmp_path):
    assert load_provider_models(tmp_path, "nobody") == {}


def test_read_model_file_without_id(tmp_path):
    path = tmp_path / "bad.yaml"
    path.write_text("name: nameless\n", encoding="utf-8")
    with pytest.raises(CatalogLoadError):
        read_model_file(path)


def test_read_model_file_invalid_yaml(tmp_path):
    path = tmp_path / "bad.yaml"
    path.write_text("id: [unclosed\n", encoding="utf-8")
    with pytest.raises(CatalogLoadError):
        read_model_file(path)


def test_save_failure_is_persistence_error(tmp_path):
    blocker = tmp_path / "file"
    blocker.write_text("x")
    with pytest.raises(PersistenceError) as exc_info:
        save_model(blocker, "acme", Model(id="a"))
    assert exc_info.value.context["operation"] == "write"
    assert exc_info.value.context["model_id"] == "a"


def test_delete_model(tmp_path):
    save_model(tmp_path, "acme", Model(id="org/deep/m"))
    assert delete_model(tmp_path, "acme", "org/deep/m")
    assert not (tmp_path / "acme" / "org").exists()
    assert (tmp_path / "acme").is_dir()
    assert not delete_model(tmp_path, "acme", "org/deep/m")


def test_clean_provider_directory_keeps_other_files(tmp_path):
    save_model(tmp_path, "acme", Model(id="a"))
    save_model(tmp_path, "acme", Model(id="org/b"))
    (tmp_path / "acme" / "logo.svg").write_text("<svg/>")

    assert clean_provider_directory(tmp_path, "acme") == 2
    assert load_provider_models(tmp_path, "acme") == {}
    assert (tmp_path / "acme" / "logo.svg").exists()
    assert clean_provider_directory(tmp_path, "missing") == 0


def test_get_provider_models_overlays_files(tmp_path, make_provider):
    catalog = Catalog(providers=[make_provider("acme", [Model(id="a", name="old"), Model(id="b")])])
    save_model(tmp_path, "acme", Model(id="a", name="new"))
    save_model(tmp_path, "acme", Model(id="c"))

    models = get_provider_models(catalog, "acme", tmp_path)

    assert sorted(models) == ["a", "b", "c"]
    assert models["a"].name == "new"
    models["b"].name = "mutated"
    assert catalog.provider_models("acme")["b"].name == ""


def test_apply_changeset(tmp_path, make_provider):
    catalog = Catalog(providers=[make_provider("acme", [Model(id="a", name="A1"), Model(id="b")])])
    save_model(tmp_path, "acme", Model(id="b"))
    changeset = compare_provider_models(
        "acme",
        get_provider_models(catalog, "acme", tmp_path),
        [Model(id="a", name="A2"), Model(id="c")],
    )

    apply_changeset(changeset, tmp_path, catalog)

    on_disk = load_provider_models(tmp_path, "acme")
    assert sorted(on_disk) == ["a", "c"]
    assert on_disk["a"].name == "A2"
    assert not os.path.exists(model_path(tmp_path, "acme", "b"))
    assert sorted(catalog.provider_models("acme")) == ["a", "c"]
