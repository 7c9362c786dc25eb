import os
from uuid import uuid4

import structlog
from fastapi import APIRouter, Depends, File, Form, UploadFile

from pdf_rag_backend.api.deps import get_clients
from pdf_rag_backend.core.clients import RagClients
from pdf_rag_backend.core.errors import ExtractionError, ValidationError
from pdf_rag_backend.schemas.rag import ErrorOut, MessageOut, NamespaceListOut, QueryIn, QueryOut, UploadOut
from pdf_rag_backend.services.ingestion import ingest_pdf
from pdf_rag_backend.services.namespaces import delete_namespace, list_namespaces
from pdf_rag_backend.services.query import answer_question

logger = structlog.get_logger(__name__)

router = APIRouter(
    prefix="/rag",
    tags=["rag"],
    responses={400: {"model": ErrorOut}, 500: {"model": ErrorOut}},
)

PDF_MAGIC = b"%PDF-"

def _is_pdf_upload(upload: UploadFile) -> bool:
    filename = (upload.filename or "").lower()
    return filename.endswith(".pdf") or upload.content_type == "application/pdf"

def _save_upload(upload: UploadFile, clients: RagClients) -> tuple[str, str]:
    settings = clients.settings
    data = upload.file.read(settings.max_upload_bytes + 1)
    if len(data) > settings.max_upload_bytes:
        raise ValidationError(f"File exceeds the {settings.MAX_UPLOAD_MB} MB upload limit")
    if not data.startswith(PDF_MAGIC):
        raise ValidationError("Only PDF files are allowed")

    file_name = os.path.basename(upload.filename or "") or "upload.pdf"
    os.makedirs(settings.UPLOAD_DIR, exist_ok=True)
    path = os.path.join(settings.UPLOAD_DIR, f"{uuid4().hex[:8]}-{file_name}")
    with open(path, "wb") as f:
        f.write(data)
    return path, file_name

def _discard(path: str) -> None:
    try:
        os.remove(path)
    except OSError:
        logger.warning("upload_cleanup_failed", path=path)

@router.post("/upload", response_model=UploadOut)
def upload_pdf(
    pdf: UploadFile | None = File(None),
    namespace: str = Form("default"),
    clients: RagClients = Depends(get_clients),
):
    if pdf is None:
        raise ValidationError("No PDF file uploaded")
    if not _is_pdf_upload(pdf):
        raise ValidationError("Only PDF files are allowed")
    namespace = namespace.strip() or "default"

    path, file_name = _save_upload(pdf, clients)
    try:
        result = ingest_pdf(clients, path, {"namespace": namespace, "file_name": file_name})
    except ExtractionError:
        # unreadable files are dropped; other failures keep the file for a retry
        _discard(path)
        raise

    return UploadOut(file_name=result.file_name, chunks=result.chunks, pages=result.pages)

@router.post("/query", response_model=QueryOut)
def query(payload: QueryIn, clients: RagClients = Depends(get_clients)):
    return answer_question(clients, payload.question, payload.namespace, payload.top_k)

@router.get("/namespaces", response_model=NamespaceListOut)
def namespaces(clients: RagClients = Depends(get_clients)):
    return NamespaceListOut(namespaces=list_namespaces(clients))

@router.delete("/namespace/{namespace}", response_model=MessageOut)
def remove_namespace(namespace: str, clients: RagClients = Depends(get_clients)):
    delete_namespace(clients, namespace)
    return MessageOut(message=f"Namespace \"{namespace}\" deleted")
