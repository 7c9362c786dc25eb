import openai
import structlog

from pdf_rag_backend.core.errors import EmbeddingError

logger = structlog.get_logger(__name__)


class OpenAIEmbedder:
    """Hosted embeddings; the same instance serves ingestion and queries."""

    def __init__(self, client: openai.OpenAI, model: str, dimensions: int, batch_size: int = 100):
        self.client = client
        self.model = model
        self.dimensions = dimensions
        self.batch_size = batch_size

    def embed_texts(self, texts: list[str]) -> list[list[float]]:
        out: list[list[float]] = []
        for start in range(0, len(texts), self.batch_size):
            batch = texts[start:start + self.batch_size]
            try:
                response = self.client.embeddings.create(
                    model=self.model,
                    input=batch,
                    dimensions=self.dimensions,
                )
            except openai.OpenAIError as exc:
                raise EmbeddingError(f"Embedding request failed: {exc}") from exc
            out.extend(item.embedding for item in response.data)
        logger.debug("texts_embedded", model=self.model, count=len(out))
        return out

    def embed_query(self, text: str) -> list[float]:
        return self.embed_texts([text])[0]
