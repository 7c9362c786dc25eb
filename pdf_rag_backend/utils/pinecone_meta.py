from typing import Any

from pdf_rag_backend.services.chunker import PageChunk

def clean_metadata(md: dict[str, Any]) -> dict[str, Any]:
    """
    Pinecone metadata values must be string, number, boolean or list[str].
    Nulls are rejected, so keys with None are dropped.
    """
    cleaned: dict[str, Any] = {}
    for k, v in md.items():
        if v is None:
            continue
        if isinstance(v, (str, int, float, bool)):
            cleaned[k] = v
        elif isinstance(v, list) and all(isinstance(x, str) for x in v):
            cleaned[k] = v
    return cleaned


def chunk_metadata(
    chunk: PageChunk,
    *,
    file_name: str,
    namespace: str,
    document_id: str,
    uploaded_at: str,
    source: str | None = None,
    extra: dict[str, Any] | None = None,
) -> dict[str, Any]:
    # caller-supplied keys never override the chunk's own fields
    md = dict(extra or {})
    md.update({
        "text": chunk.text,
        "file_name": file_name,
        "page": chunk.page,
        "chunk_index": chunk.chunk_index,
        "namespace": namespace,
        "document_id": document_id,
        "uploaded_at": uploaded_at,
        "source": source,
    })
    return clean_metadata(md)


def page_from_metadata(md: dict[str, Any]) -> int | None:
    page = md.get("page")
    if isinstance(page, float):
        # Pinecone returns all numbers as floats
        page = int(page)
    return page if isinstance(page, int) else None
