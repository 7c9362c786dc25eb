"""
Process-wide client bundle.

`build_clients` runs once at startup; the resulting `RagClients` is passed
explicitly to the ingestion, query and namespace functions.
"""

from dataclasses import dataclass, field
from typing import Protocol

import openai
import structlog
from pinecone import Pinecone

from pdf_rag_backend.core.config import Settings
from pdf_rag_backend.core.errors import ConfigurationError
from pdf_rag_backend.services.embeddings import OpenAIEmbedder
from pdf_rag_backend.services.generation import OllamaGenerator, OpenAIGenerator
from pdf_rag_backend.services.pinecone_store import PineconeStore, get_or_create_index
from pdf_rag_backend.services.retrieval import RelevancePolicy

logger = structlog.get_logger(__name__)


class Embedder(Protocol):
    def embed_texts(self, texts: list[str]) -> list[list[float]]: ...
    def embed_query(self, text: str) -> list[float]: ...


class Generator(Protocol):
    def generate(self, messages: list[dict]) -> str: ...


@dataclass(frozen=True)
class RagClients:
    settings: Settings
    embedder: Embedder
    store: PineconeStore
    generator: Generator
    relevance: RelevancePolicy = field(default_factory=RelevancePolicy)


def _require(value: str, name: str) -> None:
    if not value:
        raise ConfigurationError(f"{name} is not configured. Add it to your .env file.")


def build_embedder(settings: Settings, openai_client: openai.OpenAI | None) -> Embedder:
    if settings.EMBEDDING_PROVIDER == "openai":
        return OpenAIEmbedder(
            openai_client,
            model=settings.EMBEDDING_MODEL,
            dimensions=settings.EMBEDDING_DIM,
            batch_size=settings.EMBED_BATCH_SIZE,
        )
    if settings.EMBEDDING_PROVIDER == "local":
        # imported lazily so the hosted setup never loads torch
        from pdf_rag_backend.services.local_embeddings import LocalEmbedder
        return LocalEmbedder(settings.EMBEDDING_MODEL, dimensions=settings.EMBEDDING_DIM)
    raise ConfigurationError(f"Unknown EMBEDDING_PROVIDER \"{settings.EMBEDDING_PROVIDER}\"")


def build_generator(settings: Settings, openai_client: openai.OpenAI | None) -> Generator:
    if settings.LLM_PROVIDER == "openai":
        return OpenAIGenerator(openai_client, model=settings.LLM_MODEL, temperature=settings.LLM_TEMPERATURE)
    if settings.LLM_PROVIDER == "ollama":
        return OllamaGenerator(
            settings.OLLAMA_BASE_URL,
            model=settings.OLLAMA_MODEL,
            temperature=settings.LLM_TEMPERATURE,
            timeout=settings.REQUEST_TIMEOUT_SECONDS,
        )
    raise ConfigurationError(f"Unknown LLM_PROVIDER \"{settings.LLM_PROVIDER}\"")


def build_clients(settings: Settings) -> RagClients:
    relevance = RelevancePolicy.from_settings(settings)

    _require(settings.PINECONE_API_KEY, "PINECONE_API_KEY")
    openai_client = None
    if "openai" in (settings.EMBEDDING_PROVIDER, settings.LLM_PROVIDER):
        _require(settings.OPENAI_API_KEY, "OPENAI_API_KEY")
        # failures surface to the caller immediately
        openai_client = openai.OpenAI(
            api_key=settings.OPENAI_API_KEY,
            timeout=settings.REQUEST_TIMEOUT_SECONDS,
            max_retries=0,
        )

    embedder = build_embedder(settings, openai_client)
    generator = build_generator(settings, openai_client)

    try:
        pc = Pinecone(api_key=settings.PINECONE_API_KEY)
        index = get_or_create_index(pc, settings)
    except ConfigurationError:
        raise
    except Exception as exc:
        raise ConfigurationError(f"Could not connect to Pinecone: {exc}") from exc

    logger.info(
        "rag_clients_ready",
        index=settings.PINECONE_INDEX_NAME,
        embedding_provider=settings.EMBEDDING_PROVIDER,
        embedding_model=settings.EMBEDDING_MODEL,
        llm_provider=settings.LLM_PROVIDER,
    )
    return RagClients(
        settings=settings,
        embedder=embedder,
        store=PineconeStore(
            index, upsert_batch_size=settings.UPSERT_BATCH_SIZE, timeout=settings.REQUEST_TIMEOUT_SECONDS
        ),
        generator=generator,
        relevance=relevance,
    )
