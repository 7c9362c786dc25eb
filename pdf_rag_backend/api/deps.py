from fastapi import Request

from pdf_rag_backend.core.clients import RagClients
from pdf_rag_backend.core.errors import ConfigurationError

def get_clients(request: Request) -> RagClients:
    clients = getattr(request.app.state, "rag_clients", None)
    if clients is None:
        error = getattr(request.app.state, "rag_error", None)
        raise error or ConfigurationError("RAG service is not initialized")
    return clients
