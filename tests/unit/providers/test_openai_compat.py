from types import SimpleNamespace

from starmap.catalogs.types import Provider
from starmap.providers import get_client
from starmap.providers.openai_compat import (
    OPENAI_COMPATIBLE_ENDPOINTS,
    OpenAICompatibleClient,
    infer_features,
    normalize_author,
)


def _factory(entries, seen):
    def factory(api_key, base_url, timeout):
        seen.update(api_key=api_key, base_url=base_url, timeout=timeout)
        return SimpleNamespace(models=SimpleNamespace(list=lambda: SimpleNamespace(data=entries)))

    return factory


def _provider():
    return Provider(id="groq", api_key_value="gsk-test")


def test_lists_models_with_groq_extras():
    entries = [
        SimpleNamespace(
            id="llama-3.3-70b-versatile",
            owned_by="Meta",
            created=1733447754,
            context_window=131072,
            max_completion_tokens=32768,
            active=True,
        ),
        SimpleNamespace(id="retired-model", owned_by="Meta", created=0, active=False),
    ]
    seen = {}
    client = OpenAICompatibleClient(
        "groq", base_url="https://api.groq.com/openai/v1", client_factory=_factory(entries, seen)
    )

    models = client.list_models(_provider(), timeout=12.5)

    assert seen == {
        "api_key": "gsk-test",
        "base_url": "https://api.groq.com/openai/v1",
        "timeout": 12.5,
    }
    assert [m.id for m in models] == ["llama-3.3-70b-versatile"]
    model = models[0]
    assert model.name == "llama-3.3-70b-versatile"
    assert model.authors[0].id == "meta"
    assert model.limits.context_window == 131072
    assert model.limits.output_tokens == 32768
    assert model.created_at == "2024-12-06T01:15:54Z"


def test_plain_openai_entries():
    entries = [SimpleNamespace(id="gpt-4o", owned_by="system", created=1715367049)]
    client = OpenAICompatibleClient("openai", client_factory=_factory(entries, {}))

    model = client.list_models(Provider(id="openai", api_key_value="sk"))[0]

    assert model.authors[0].id == "openai"
    assert model.limits is None
    assert model.features.tools is True
    assert model.features.structured_outputs is True


def test_dict_entries_are_supported():
    client = OpenAICompatibleClient("deepseek", client_factory=_factory([{"id": "deepseek-chat", "owned_by": "deepseek"}], {}))
    models = client.list_models(Provider(id="deepseek", api_key_value="k"))
    assert models[0].id == "deepseek-chat"
    assert models[0].authors[0].name == "DeepSeek"


def test_entries_without_id_are_skipped():
    client = OpenAICompatibleClient("openai", client_factory=_factory([SimpleNamespace(id="")], {}))
    assert client.list_models(Provider(id="openai", api_key_value="k")) == []


def test_infer_features_for_embeddings():
    features = infer_features("text-embedding-3-small")
    assert features.modalities.input == ["text"]
    assert features.modalities.output == []
    assert features.streaming is None
    assert features.tools is None


def test_normalize_author():
    assert normalize_author("mistralai").id == "mistral"
    assert normalize_author("openai-internal").name == "OpenAI"
    unknown = normalize_author("Some Lab")
    assert (unknown.id, unknown.name) == ("some-lab", "Some Lab")


def test_compatible_providers_are_registered():
    for provider_id, base_url in OPENAI_COMPATIBLE_ENDPOINTS.items():
        client = get_client(provider_id)
        assert client.name == provider_id
        assert client.base_url == base_url
