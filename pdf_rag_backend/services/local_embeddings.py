"""Local sentence-transformers embeddings for running without a hosted embedding API."""

import structlog
from sentence_transformers import SentenceTransformer

from pdf_rag_backend.core.errors import ConfigurationError, EmbeddingError

logger = structlog.get_logger(__name__)


class LocalEmbedder:
    def __init__(self, model_name: str, dimensions: int, batch_size: int = 32):
        logger.info("loading_local_embedding_model", model=model_name)
        self.model = SentenceTransformer(model_name)
        self.model_name = model_name
        self.batch_size = batch_size

        actual = self.model.get_sentence_embedding_dimension()
        if actual != dimensions:
            raise ConfigurationError(
                f"Local embedding model {model_name} produces {actual}-dimensional vectors "
                f"but EMBEDDING_DIM is {dimensions}"
            )
        self.dimensions = dimensions

    def embed_texts(self, texts: list[str]) -> list[list[float]]:
        try:
            # normalized vectors keep cosine scores in a comparable range
            embs = self.model.encode(
                texts,
                normalize_embeddings=True,
                batch_size=self.batch_size,
                show_progress_bar=False,
            )
        except (RuntimeError, ValueError) as exc:
            raise EmbeddingError(f"Local embedding failed: {exc}") from exc
        return embs.tolist()

    def embed_query(self, text: str) -> list[float]:
        return self.embed_texts([text])[0]
