import pytest

from privmx_mcp.config import get_search_config, get_server_config, get_vector_config
from privmx_mcp.contracts import ToolEnvelope, build_error_from_exception
from privmx_mcp.errors import InvalidSessionStateError, KnowledgeError, VectorStoreError
from privmx_mcp.utils import normalize_input, validate_language, validate_non_empty_string


def test_search_config_defaults(monkeypatch) -> None:
    for name in ("PRIVMX_MCP_TEXT_ALGO", "PRIVMX_MCP_USE_BM25", "PRIVMX_MCP_BM25_B"):
        monkeypatch.delenv(name, raising=False)
    config = get_search_config()
    assert config.text_algo == "bm25"
    assert config.bm25_k1 == 1.2
    assert config.bm25_b == 0.75


def test_search_config_from_environment(monkeypatch) -> None:
    monkeypatch.delenv("PRIVMX_MCP_TEXT_ALGO", raising=False)
    monkeypatch.setenv("PRIVMX_MCP_USE_BM25", "false")
    monkeypatch.setenv("PRIVMX_MCP_BM25_B", "3")
    config = get_search_config()
    assert config.text_algo == "tfidf"
    assert config.bm25_b == 1.0

    monkeypatch.setenv("PRIVMX_MCP_TEXT_ALGO", "bm25")
    assert get_search_config().text_algo == "bm25"


def test_vector_config_from_environment(monkeypatch) -> None:
    monkeypatch.setenv("PRIVMX_MCP_VECTOR_BACKEND", " Qdrant ")
    monkeypatch.setenv("OPENAI_API_KEY", "")
    monkeypatch.setenv("QDRANT_URL", "http://qdrant:6333")
    config = get_vector_config()
    assert config.backend == "qdrant"
    assert config.openai_api_key is None
    assert config.qdrant_url == "http://qdrant:6333"


def test_server_config_api_data_path(monkeypatch) -> None:
    monkeypatch.setenv("PRIVMX_MCP_API_DATA_PATH", "/data/api")
    monkeypatch.setenv("PRIVMX_MCP_SESSION_TOTAL_STEPS", "not-a-number")
    config = get_server_config()
    assert config.api_data_path == "/data/api"
    assert config.session.total_steps == 5


def test_input_validators() -> None:
    assert normalize_input("  Send   Message ", lowercase=True) == "send message"
    assert validate_non_empty_string("  query ") == "query"
    with pytest.raises(ValueError):
        validate_non_empty_string("   ")
    assert validate_language(" TypeScript ") == "typescript"
    assert validate_language("") is None
    with pytest.raises(ValueError):
        validate_language("cobol")


def test_envelope_coherence() -> None:
    with pytest.raises(ValueError):
        ToolEnvelope(ok=True, error={"code": "x", "message": "y"})
    with pytest.raises(ValueError):
        ToolEnvelope(ok=False)


def test_error_codes_from_exceptions() -> None:
    payload = build_error_from_exception(InvalidSessionStateError("session-1", "completed"))
    assert payload["ok"] is False
    assert payload["error"]["code"] == "invalid_session_state"
    assert payload["error"]["details"]["action"] == "Start a new session"

    assert build_error_from_exception(VectorStoreError("down"))["error"]["code"] == "vector_store_failed"
    assert build_error_from_exception(KnowledgeError("other"))["error"]["code"] == "operation_error"
