"""Tests for shared.ollama_client."""
from shared.ollama_client import OllamaClient, _merge_fields


def test_merge_fields_wraps_thinking():
    assert _merge_fields("answer", "reasoning") == "<think>reasoning</think>\nanswer"


def test_merge_fields_single_side():
    assert _merge_fields("answer", "") == "answer"
    assert _merge_fields("", "only thinking") == "only thinking"


def test_build_payload_json_mode():
    client = OllamaClient("http://localhost:11434/", "gpt-oss:120b")
    payload = client._build_payload(
        [{"role": "user", "content": "hi"}], None, 0.3, 512, json_mode=True,
    )
    assert client.host == "http://localhost:11434"
    assert payload["model"] == "gpt-oss:120b"
    assert payload["format"] == "json"
    assert payload["options"] == {"temperature": 0.3, "num_predict": 512}
    assert payload["stream"] is False


def test_headers_include_api_key():
    assert "Authorization" not in OllamaClient("h", "m")._get_headers()
    assert OllamaClient("h", "m", api_key="k")._get_headers()["Authorization"] == "Bearer k"
