import os
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any
from uuid import uuid4

import structlog

from pdf_rag_backend.core.clients import RagClients
from pdf_rag_backend.core.errors import EmbeddingError, ExtractionError
from pdf_rag_backend.services.chunker import chunk_pages
from pdf_rag_backend.services.extractor import extract_pdf_pages
from pdf_rag_backend.utils.pinecone_meta import chunk_metadata

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class IngestionResult:
    file_name: str
    chunks: int
    pages: int


def ingest_pdf(clients: RagClients, file_path: str, metadata: dict[str, Any] | None = None) -> IngestionResult:
    """Extract, chunk, embed and upsert one PDF into its namespace.

    ``metadata`` may carry ``namespace`` (default ``"default"``) and
    ``file_name`` (defaults to the basename of ``file_path``); any other keys
    are stored on every chunk.

    The file is indexed completely or not at all. The source file is removed
    only after a successful upsert and only when DELETE_AFTER_INGEST is set.
    """
    settings = clients.settings
    extra = dict(metadata or {})
    namespace = extra.pop("namespace", None) or "default"
    file_name = extra.pop("file_name", None) or os.path.basename(file_path)
    log = logger.bind(file_name=file_name, namespace=namespace)

    pages = extract_pdf_pages(file_path)
    chunks = chunk_pages(pages, settings.CHUNK_SIZE, settings.CHUNK_OVERLAP)
    if not chunks:
        raise ExtractionError("PDF produced no text chunks")
    log.info("pdf_chunked", pages=len(pages), chunks=len(chunks))

    embeddings = clients.embedder.embed_texts([c.text for c in chunks])
    if len(embeddings) != len(chunks):
        raise EmbeddingError(
            f"Embedding service returned {len(embeddings)} vectors for {len(chunks)} chunks"
        )

    document_id = uuid4().hex
    uploaded_at = datetime.now(timezone.utc).isoformat()
    vectors = []
    for chunk, emb in zip(chunks, embeddings):
        md = chunk_metadata(
            chunk,
            file_name=file_name,
            namespace=namespace,
            document_id=document_id,
            uploaded_at=uploaded_at,
            source=file_path,
            extra=extra,
        )
        vectors.append((f"{document_id}:{chunk.chunk_index}", emb, md))

    clients.store.upsert_vectors(namespace, vectors)
    log.info("pdf_ingested", document_id=document_id, chunks=len(chunks), pages=len(pages))

    if settings.DELETE_AFTER_INGEST:
        try:
            os.remove(file_path)
        except OSError:
            log.warning("upload_cleanup_failed", path=file_path)

    return IngestionResult(file_name=file_name, chunks=len(chunks), pages=len(pages))
