from fastapi import APIRouter
from pdf_rag_backend.api.routes import rag

router = APIRouter()
router.include_router(rag.router)
