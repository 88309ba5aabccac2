"""Runtime configuration for PrivMX MCP server."""

from dataclasses import dataclass, field
import os


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default


def _text_algo() -> str:
    # TEXT_ALGO wins; USE_BM25=false is the legacy switch for tfidf
    algo = os.getenv("PRIVMX_MCP_TEXT_ALGO")
    if algo is None:
        algo = "tfidf" if not _env_bool("PRIVMX_MCP_USE_BM25", True) else "bm25"
    algo = algo.strip().lower()
    return algo if algo in {"bm25", "tfidf"} else "bm25"


@dataclass(frozen=True)
class SearchConfig:
    text_algo: str = "bm25"
    bm25_k1: float = 1.2
    bm25_b: float = 0.75
    lexical_weight: float = 0.6
    semantic_weight: float = 0.4
    max_results: int = 10


@dataclass(frozen=True)
class VectorConfig:
    backend: str = "memory"
    openai_api_key: str | None = None
    embedding_model: str = "text-embedding-3-small"
    embedding_url: str = "https://api.openai.com/v1/embeddings"
    batch_size: int = 512
    qdrant_url: str = "http://localhost:6333"
    qdrant_api_key: str | None = None
    qdrant_collection: str = "privmx-api"
    request_timeout_s: float = 30.0


@dataclass(frozen=True)
class SessionConfig:
    total_steps: int = 5
    default_language: str = "typescript"
    default_features: tuple[str, ...] = ("threads", "stores")


@dataclass(frozen=True)
class WorkflowConfig:
    min_relevance: float = 0.1


@dataclass(frozen=True)
class ServerConfig:
    """Bootstrap configuration listing everything the server wires up."""

    search: SearchConfig = field(default_factory=SearchConfig)
    vector: VectorConfig = field(default_factory=VectorConfig)
    session: SessionConfig = field(default_factory=SessionConfig)
    workflow: WorkflowConfig = field(default_factory=WorkflowConfig)
    api_data_path: str | None = None
    code_generators: tuple[str, ...] = ("typescript", "javascript", "java", "swift", "csharp")


def get_search_config() -> SearchConfig:
    """Load lexical and fusion settings from environment variables."""
    return SearchConfig(
        text_algo=_text_algo(),
        bm25_k1=max(0.0, _env_float("PRIVMX_MCP_BM25_K1", 1.2)),
        bm25_b=min(1.0, max(0.0, _env_float("PRIVMX_MCP_BM25_B", 0.75))),
        lexical_weight=max(0.0, _env_float("PRIVMX_MCP_LEXICAL_WEIGHT", 0.6)),
        semantic_weight=max(0.0, _env_float("PRIVMX_MCP_SEMANTIC_WEIGHT", 0.4)),
        max_results=max(1, _env_int("PRIVMX_MCP_MAX_RESULTS", 10)),
    )


def get_vector_config() -> VectorConfig:
    """Load embedding and vector backend settings from environment variables."""
    api_key = os.getenv("OPENAI_API_KEY")
    qdrant_key = os.getenv("QDRANT_API_KEY")
    return VectorConfig(
        backend=os.getenv("PRIVMX_MCP_VECTOR_BACKEND", "memory").strip().lower(),
        openai_api_key=api_key if api_key else None,
        embedding_model=os.getenv("PRIVMX_MCP_EMBEDDING_MODEL", "text-embedding-3-small"),
        embedding_url=os.getenv("PRIVMX_MCP_EMBEDDING_URL", "https://api.openai.com/v1/embeddings"),
        batch_size=max(1, _env_int("PRIVMX_MCP_EMBEDDING_BATCH_SIZE", 512)),
        qdrant_url=os.getenv("QDRANT_URL", "http://localhost:6333"),
        qdrant_api_key=qdrant_key if qdrant_key else None,
        qdrant_collection=os.getenv("QDRANT_COLLECTION", "privmx-api"),
        request_timeout_s=max(1.0, _env_float("PRIVMX_MCP_REQUEST_TIMEOUT_S", 30.0)),
    )


def get_session_config() -> SessionConfig:
    return SessionConfig(
        total_steps=max(1, _env_int("PRIVMX_MCP_SESSION_TOTAL_STEPS", 5)),
        default_language=os.getenv("PRIVMX_MCP_DEFAULT_LANGUAGE", "typescript"),
    )


def get_server_config() -> ServerConfig:
    """Assemble the full bootstrap configuration from environment variables."""
    data_path = os.getenv("PRIVMX_MCP_API_DATA_PATH")
    return ServerConfig(
        search=get_search_config(),
        vector=get_vector_config(),
        session=get_session_config(),
        workflow=WorkflowConfig(
            min_relevance=max(0.0, _env_float("PRIVMX_MCP_WORKFLOW_MIN_RELEVANCE", 0.1)),
        ),
        api_data_path=data_path if data_path else None,
    )
