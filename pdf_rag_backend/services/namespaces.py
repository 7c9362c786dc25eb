import structlog

from pdf_rag_backend.core.clients import RagClients
from pdf_rag_backend.core.errors import ValidationError
from pdf_rag_backend.schemas.rag import NamespaceOut

logger = structlog.get_logger(__name__)


def list_namespaces(clients: RagClients) -> list[NamespaceOut]:
    counts = clients.store.namespace_counts()
    return [NamespaceOut(name=name, vector_count=count) for name, count in sorted(counts.items())]


def delete_namespace(clients: RagClients, name: str) -> None:
    # irreversible; other namespaces are untouched
    name = (name or "").strip()
    if not name:
        raise ValidationError("Namespace is required")
    if name not in clients.store.namespace_counts():
        # nothing stored under this name; deleting it again is a no-op
        logger.info("namespace_already_empty", namespace=name)
        return
    clients.store.delete_namespace(name)
    logger.info("namespace_deleted", namespace=name)
