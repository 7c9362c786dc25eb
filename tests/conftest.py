import pytest
from fastapi.testclient import TestClient

from pdf_rag_backend.core.clients import RagClients
from pdf_rag_backend.core.config import Settings
from pdf_rag_backend.core.errors import EmbeddingError, GenerationError
from pdf_rag_backend.main import create_app
from pdf_rag_backend.services.pinecone_store import PineconeStore
from pdf_rag_backend.services.retrieval import RelevancePolicy


class FakeEmbedder:
    def __init__(self, dim: int = 4):
        self.dim = dim
        self.calls = 0
        self.fail = False

    def embed_texts(self, texts):
        self.calls += 1
        if self.fail:
            raise EmbeddingError("embedding service unavailable")
        return [[float(len(t))] + [0.5] * (self.dim - 1) for t in texts]

    def embed_query(self, text):
        return self.embed_texts([text])[0]


class FakeIndex:
    """In-memory stand-in for a Pinecone index.

    Query scores come from `scores` when set (assigned in insertion order),
    otherwise they decrease from 0.9 in steps of 0.01.
    """

    def __init__(self):
        self.namespaces: dict[str, dict[str, tuple]] = {}
        self.scores: list[float] | None = None
        self.fail_upsert_on_call: int | None = None
        self.fail_query = False
        self.upsert_calls = 0
        self.last_query: dict | None = None
        self.request_timeouts: list[float | None] = []
        self.delete_calls: list[dict] = []

    def upsert(self, vectors, namespace, _request_timeout=None):
        self.request_timeouts.append(_request_timeout)
        self.upsert_calls += 1
        if self.fail_upsert_on_call == self.upsert_calls:
            raise RuntimeError("pinecone upsert failed")
        ns = self.namespaces.setdefault(namespace, {})
        for vec_id, values, md in vectors:
            ns[vec_id] = (values, md)

    def query(self, vector, top_k, include_metadata, namespace, _request_timeout=None):
        self.request_timeouts.append(_request_timeout)
        self.last_query = {"top_k": top_k, "namespace": namespace}
        if self.fail_query:
            raise RuntimeError("pinecone query failed")
        items = list(self.namespaces.get(namespace, {}).items())
        matches = []
        for i, (vec_id, (_values, md)) in enumerate(items):
            score = self.scores[i] if self.scores is not None and i < len(self.scores) else 0.9 - 0.01 * i
            matches.append({"id": vec_id, "score": score, "metadata": md})
        matches.sort(key=lambda m: m["score"], reverse=True)
        return {"matches": matches[:top_k], "namespace": namespace}

    def delete(self, ids=None, delete_all=False, namespace="", _request_timeout=None):
        self.request_timeouts.append(_request_timeout)
        self.delete_calls.append({"ids": ids, "delete_all": delete_all, "namespace": namespace})
        ns = self.namespaces.get(namespace, {})
        if delete_all:
            self.namespaces.pop(namespace, None)
            return
        for vec_id in ids or []:
            ns.pop(vec_id, None)
        if not ns:
            self.namespaces.pop(namespace, None)

    def describe_index_stats(self, _request_timeout=None):
        self.request_timeouts.append(_request_timeout)
        return {
            "dimension": 4,
            "namespaces": {name: {"vector_count": len(v)} for name, v in self.namespaces.items() if v},
        }

    def add_chunks(self, namespace: str, texts: list[str], file_name: str = "report.pdf"):
        ns = self.namespaces.setdefault(namespace, {})
        for i, text in enumerate(texts):
            ns[f"doc:{len(ns)}"] = ([0.1] * 4, {
                "text": text, "file_name": file_name, "page": float(i + 1), "chunk_index": i,
            })


class FakeGenerator:
    def __init__(self, answer: str = "The revenue grew 12% [1] driven by exports [2]."):
        self.answer = answer
        self.calls: list[list[dict]] = []
        self.fail = False

    def generate(self, messages):
        self.calls.append(messages)
        if self.fail:
            raise GenerationError("model unavailable")
        return self.answer


@pytest.fixture
def settings(tmp_path):
    return Settings(
        OPENAI_API_KEY="sk-test",
        PINECONE_API_KEY="pc-test",
        UPLOAD_DIR=str(tmp_path / "uploads"),
        UPSERT_BATCH_SIZE=5,
        EMBEDDING_DIM=4,
    )


@pytest.fixture
def embedder():
    return FakeEmbedder()


@pytest.fixture
def index():
    return FakeIndex()


@pytest.fixture
def generator():
    return FakeGenerator()


@pytest.fixture
def clients(settings, embedder, index, generator):
    return RagClients(
        settings=settings,
        embedder=embedder,
        store=PineconeStore(
            index, upsert_batch_size=settings.UPSERT_BATCH_SIZE, timeout=settings.REQUEST_TIMEOUT_SECONDS
        ),
        generator=generator,
        relevance=RelevancePolicy.from_settings(settings),
    )


@pytest.fixture
def api(settings, clients):
    with TestClient(create_app(settings, clients)) as client:
        yield client


def page_text(page: int, n_chars: int = 2500) -> str:
    parts = []
    i = 0
    while sum(len(p) for p in parts) < n_chars:
        parts.append(f"Sentence {i} on page {page} describes quarterly figure {i * 7}. ")
        i += 1
    return "".join(parts)[:n_chars].strip()
