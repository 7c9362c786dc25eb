import structlog

from pdf_rag_backend.core.clients import RagClients
from pdf_rag_backend.core.errors import ValidationError
from pdf_rag_backend.schemas.rag import QueryOut
from pdf_rag_backend.services.prompting import (
    NO_DOCUMENTS_MESSAGE,
    NOT_FOUND_MESSAGE,
    build_citations,
    build_messages,
)
from pdf_rag_backend.services.retrieval import select_relevant

logger = structlog.get_logger(__name__)


def answer_question(
    clients: RagClients,
    question: str,
    namespace: str = "default",
    top_k: int | None = None,
) -> QueryOut:
    """Answer a question from one namespace's documents, with citations.

    Returns a canned response without calling the LLM when the namespace is
    empty or nothing relevant enough was retrieved.
    """
    settings = clients.settings
    question = (question or "").strip()
    if not question:
        raise ValidationError("Question is required")
    namespace = (namespace or "").strip() or "default"
    top_k = min(top_k or settings.TOP_K, settings.MAX_TOP_K)
    log = logger.bind(namespace=namespace, top_k=top_k)

    q_emb = clients.embedder.embed_query(question)
    matches = clients.store.query(namespace, q_emb, top_k=top_k)

    if not matches:
        log.info("query_short_circuit", reason="no_documents")
        return QueryOut(answer=NO_DOCUMENTS_MESSAGE, citations=[], sources=0)

    selected = select_relevant(matches, clients.relevance)
    if not selected:
        log.info(
            "query_short_circuit",
            reason="below_relevance_threshold",
            candidates=len(matches),
            top_score=max(m["score"] for m in matches),
        )
        return QueryOut(answer=NOT_FOUND_MESSAGE, citations=[], sources=0)

    answer = clients.generator.generate(build_messages(question, selected))
    citations = build_citations(selected, settings.EXCERPT_CHARS)
    log.info("query_answered", candidates=len(matches), sources=len(citations))
    return QueryOut(answer=answer, citations=citations, sources=len(citations))
