import base64

from nyapet_agent.providers.mock import MockLLMProvider, MockTTSProvider
from nyapet_agent.providers.models import ChatMessage, LLMRequest, ProviderConfig, TTSRequest


async def test_echoes_last_user_message():
    provider = MockLLMProvider(ProviderConfig())
    response = await provider.chat(
        LLMRequest(messages=[ChatMessage(role="user", content="hello cat"), ChatMessage(role="assistant", content="x")])
    )
    assert response.text == "hello cat"
    assert response.model == "mock-model"
    assert response.usage.total_tokens == 4


async def test_fixed_reply():
    provider = MockLLMProvider(ProviderConfig(extra={"reply": "nya"}))
    response = await provider.chat(LLMRequest(messages=[ChatMessage(role="user", content="hi")]))
    assert response.text == "nya"


async def test_tool_call_only_when_tool_offered():
    provider = MockLLMProvider(ProviderConfig(extra={"tool_call": "pet", "tool_arguments": '{"times": 2}'}))
    plain = await provider.chat(LLMRequest(messages=[ChatMessage(role="user", content="hi")]))
    assert plain.tool_calls is None

    offered = await provider.chat(
        LLMRequest(messages=[ChatMessage(role="user", content="hi")], tools=[{"name": "pet", "description": ""}])
    )
    assert offered.finish_reason == "tool_calls"
    assert offered.tool_calls[0].name == "pet"
    assert offered.tool_calls[0].arguments == '{"times": 2}'


async def test_answers_with_tool_output_after_tool_turn():
    provider = MockLLMProvider(ProviderConfig(extra={"tool_call": "pet"}))
    response = await provider.chat(
        LLMRequest(
            messages=[
                ChatMessage(role="user", content="hi"),
                ChatMessage(role="tool", content="purred", tool_call_id="c1", tool_name="pet"),
            ],
            tools=[{"name": "pet", "description": ""}],
        )
    )
    assert response.text == "purred"
    assert response.tool_calls is None


async def test_models_and_check():
    provider = MockLLMProvider(ProviderConfig(model="tiny"))
    assert await provider.get_models() == ["tiny"]
    result = await provider.test()
    assert result.success and result.model == "tiny"


async def test_mock_tts():
    provider = MockTTSProvider(ProviderConfig(extra={"voice": "kitty"}))
    response = await provider.synthesize(TTSRequest(text="meow", format="ogg"))
    assert base64.b64decode(response.audio_base64) == b"meow"
    assert response.mime_type == "audio/ogg"
    assert response.duration_ms == 240
    assert [v.id for v in await provider.get_voices()] == ["kitty"]
