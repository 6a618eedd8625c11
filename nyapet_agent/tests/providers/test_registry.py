"""Provider registries and capability field injection."""

from __future__ import annotations

from nyapet_agent.providers.mock import MockLLMProvider
from nyapet_agent.providers.models import ProviderConfig, ProviderConfigField, ProviderMetadata
from nyapet_agent.providers.registry import (
    PROVIDER_CAPABILITY_FIELDS,
    ProviderRegistry,
    build_default_llm_registry,
    build_default_tts_registry,
    with_capability_fields,
)


def test_default_llm_registry_contents_and_order():
    registry = build_default_llm_registry()
    ids = [m.id for m in registry.get_all()]
    assert ids == [
        "openai",
        "deepseek",
        "openrouter",
        "siliconflow",
        "moonshot",
        "gemini",
        "dashscope",
        "zhipu",
        "volcengine",
        "groq",
        "mistral",
        "xai",
        "anthropic",
        "mock",
    ]


def test_default_tts_registry_contents():
    assert [m.id for m in build_default_tts_registry().get_all()] == ["openai_tts", "elevenlabs", "fish_audio", "mock_tts"]


def test_registries_are_independent():
    first = build_default_llm_registry()
    second = build_default_llm_registry()
    first.unregister("mock")
    assert "mock" not in first
    assert "mock" in second


def test_every_llm_type_carries_capability_fields():
    keys = {f.key for f in PROVIDER_CAPABILITY_FIELDS}
    for metadata in build_default_llm_registry().get_all():
        declared = [f.key for f in metadata.config_schema]
        assert keys <= set(declared), metadata.id
        assert len(declared) == len(set(declared)), metadata.id


def test_capability_fields_not_duplicated():
    meta = ProviderMetadata(
        id="x",
        name="X",
        config_schema=(ProviderConfigField(key="supportsVision", label="Vision", type="boolean", default="true"),),
    )
    merged = with_capability_fields(meta)
    assert [f.key for f in merged.config_schema] == [
        "supportsVision",
        "supportsText",
        "supportsFile",
        "supportsToolCalling",
    ]
    assert merged.get_field("supportsVision").default == "true"
    assert with_capability_fields(merged) == merged


def test_create_and_unknown_type():
    registry = build_default_llm_registry()
    provider = registry.create("mock", ProviderConfig(model="m"))
    assert isinstance(provider, MockLLMProvider)
    assert provider.get_model() == "m"
    assert registry.create("nope", ProviderConfig()) is None
    assert registry.get("nope") is None


def test_reregister_keeps_position():
    registry: ProviderRegistry = ProviderRegistry("llm")
    a = ProviderMetadata(id="a", name="A")
    b = ProviderMetadata(id="b", name="B")
    registry.register(a, lambda cfg: "a1")
    registry.register(b, lambda cfg: "b1")
    registry.register(ProviderMetadata(id="a", name="A2"), lambda cfg: "a2")

    assert [m.name for m in registry.get_all()] == ["A2", "B"]
    assert registry.create("a", ProviderConfig()) == "a2"
    assert len(registry) == 2
    assert registry.unregister("a")
    assert not registry.unregister("a")
