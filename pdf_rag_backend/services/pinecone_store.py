from typing import Any

import structlog
from pinecone import Pinecone, ServerlessSpec

from pdf_rag_backend.core.config import Settings
from pdf_rag_backend.core.errors import ConfigurationError, StorageError

logger = structlog.get_logger(__name__)


def _setup_instructions(settings: Settings) -> str:
    return (
        f"Pinecone index \"{settings.PINECONE_INDEX_NAME}\" does not exist. "
        f"Create it at https://app.pinecone.io/ with:\n"
        f"  - Name: {settings.PINECONE_INDEX_NAME}\n"
        f"  - Dimensions: {settings.EMBEDDING_DIM}\n"
        f"  - Metric: cosine\n"
        f"or set PINECONE_AUTO_CREATE=true"
    )


def get_or_create_index(pc: Pinecone, settings: Settings):
    existing = {i["name"] for i in pc.list_indexes()}
    if settings.PINECONE_INDEX_NAME not in existing:
        if not settings.PINECONE_AUTO_CREATE:
            raise ConfigurationError(_setup_instructions(settings))
        logger.info("creating_pinecone_index", index=settings.PINECONE_INDEX_NAME)
        pc.create_index(
            name=settings.PINECONE_INDEX_NAME,
            dimension=settings.EMBEDDING_DIM,
            metric="cosine",
            spec=ServerlessSpec(cloud=settings.PINECONE_CLOUD, region=settings.PINECONE_REGION),
        )

    description = pc.describe_index(settings.PINECONE_INDEX_NAME)
    if description["dimension"] != settings.EMBEDDING_DIM:
        raise ConfigurationError(
            f"Pinecone index \"{settings.PINECONE_INDEX_NAME}\" has dimension "
            f"{description['dimension']} but embeddings are {settings.EMBEDDING_DIM}-dimensional. "
            f"Recreate the index or change EMBEDDING_DIM."
        )
    if description["metric"] != "cosine":
        raise ConfigurationError(
            f"Pinecone index \"{settings.PINECONE_INDEX_NAME}\" uses metric "
            f"\"{description['metric']}\"; relevance thresholds require cosine."
        )
    return pc.Index(settings.PINECONE_INDEX_NAME)


class PineconeStore:
    """Namespace-scoped operations on one Pinecone index.

    Every failure from the index is re-raised as StorageError.
    """

    def __init__(self, index, upsert_batch_size: int = 100, timeout: float | None = None):
        self.index = index
        self.upsert_batch_size = upsert_batch_size
        self.timeout = timeout

    def _request_kwargs(self) -> dict[str, Any]:
        # applies the same wall-clock limit to every data-plane call
        return {"_request_timeout": self.timeout} if self.timeout else {}

    def upsert_vectors(self, namespace: str, vectors: list[tuple[str, list[float], dict]]) -> int:
        """
        vectors: [(id, embedding, metadata)]

        Upserts in batches. If a batch fails, ids already written by this call
        are deleted again so a file is never left partially indexed.
        """
        written: list[str] = []
        try:
            for start in range(0, len(vectors), self.upsert_batch_size):
                batch = vectors[start:start + self.upsert_batch_size]
                self.index.upsert(vectors=batch, namespace=namespace, **self._request_kwargs())
                written.extend(vec_id for vec_id, _values, _md in batch)
        except Exception as exc:
            self._rollback(namespace, written)
            raise StorageError(f"Vector store upsert failed: {exc}") from exc
        return len(written)

    def _rollback(self, namespace: str, ids: list[str]) -> None:
        if not ids:
            return
        try:
            for start in range(0, len(ids), self.upsert_batch_size):
                self.index.delete(
                    ids=ids[start:start + self.upsert_batch_size], namespace=namespace, **self._request_kwargs()
                )
        except Exception:
            logger.exception("upsert_rollback_failed", namespace=namespace, ids=len(ids))

    def query(self, namespace: str, embedding: list[float], top_k: int) -> list[dict[str, Any]]:
        try:
            res = self.index.query(
                vector=embedding,
                top_k=top_k,
                include_metadata=True,
                namespace=namespace,
                **self._request_kwargs(),
            )
        except Exception as exc:
            raise StorageError(f"Vector store search failed: {exc}") from exc

        matches = []
        for m in res["matches"]:
            matches.append({
                "id": m["id"],
                "score": float(m["score"]),
                "metadata": m.get("metadata") or {},
            })
        return matches

    def namespace_counts(self) -> dict[str, int]:
        try:
            stats = self.index.describe_index_stats(**self._request_kwargs())
        except Exception as exc:
            raise StorageError(f"Could not read index stats: {exc}") from exc
        namespaces = stats["namespaces"] or {}
        return {name: int(summary["vector_count"] or 0) for name, summary in namespaces.items()}

    def delete_namespace(self, namespace: str) -> None:
        try:
            self.index.delete(delete_all=True, namespace=namespace, **self._request_kwargs())
        except Exception as exc:
            raise StorageError(f"Could not delete namespace {namespace}: {exc}") from exc
