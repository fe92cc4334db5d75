from starmap.modelsdev import ModelsDevIndex, ModelsDevModel, ModelsDevProvider
from starmap.modelsdev.types import ModelsDevCost, ModelsDevLimit, alternate_ids


def _index():
    return ModelsDevIndex(
        {
            "google": ModelsDevProvider(
                id="google",
                models={"gemini-2.5-pro": ModelsDevModel(id="gemini-2.5-pro", name="Gemini 2.5 Pro")},
            ),
            "groq": ModelsDevProvider(
                id="groq",
                models={
                    "llama_3_8b": ModelsDevModel(id="llama_3_8b", name="Llama 3 8B"),
                    "qwen3-32b": ModelsDevModel(id="qwen3-32b", name="Qwen3 32B"),
                },
            ),
        }
    )


def test_provider_aliases():
    index = _index()
    assert index.provider("google-ai-studio").id == "google"
    assert index.find_model("google-ai-studio", "gemini-2.5-pro").name == "Gemini 2.5 Pro"
    assert index.provider("mistral") is None


def test_find_model_by_alternate_spelling():
    index = _index()
    assert index.find_model("groq", "llama-3-8b").id == "llama_3_8b"
    assert index.find_model("groq", "qwen/qwen3-32b").id == "qwen3-32b"
    assert index.find_model("groq", "unknown") is None


def test_alternate_ids():
    assert alternate_ids("qwen/qwen3-32b") == ["qwen3-32b", "qwen/qwen3_32b"]
    assert alternate_ids("gpt_4")[:2] == ["openai/gpt_4", "anthropic/gpt_4"]
    assert alternate_ids("gpt_4")[-1] == "gpt-4"
    assert "gpt4" not in alternate_ids("gpt4")


def test_to_model():
    record = ModelsDevModel(
        id="gpt-4o",
        name="GPT-4o",
        tool_call=True,
        release_date="2024-05-13",
        modalities_input=("text", "image"),
        modalities_output=("text",),
        cost=ModelsDevCost(input=2.5, output=10.0, cache_read=0.0),
        limit=ModelsDevLimit(context=128000),
    )

    model = record.to_model()

    assert model.name == "GPT-4o"
    assert model.metadata.release_date == "2024-05-13"
    assert model.features.tools is True
    assert model.features.modalities.input == ["text", "image"]
    assert model.limits.context_window == 128000
    assert model.limits.output_tokens is None
    assert model.pricing.currency == "USD"
    assert model.pricing.tokens.input.per_1m == 2.5
    assert model.pricing.tokens.input.per_token == 2.5 / 1_000_000
    assert model.pricing.tokens.cache_read is None


def test_to_model_leaves_unknowns_unset():
    model = ModelsDevModel(id="bare").to_model()
    assert model.metadata is None
    assert model.limits is None
    assert model.pricing is None
    assert model.features.modalities is None
