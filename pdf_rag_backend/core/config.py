from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    APP_NAME: str = "pdf-rag-backend"
    ENV: str = "dev"
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False
    ALLOWED_ORIGINS: str = "http://localhost:5173"

    OPENAI_API_KEY: str = ""
    REQUEST_TIMEOUT_SECONDS: float = 60.0

    EMBEDDING_PROVIDER: str = "openai"  # openai | local
    EMBEDDING_MODEL: str = "text-embedding-3-small"
    EMBEDDING_DIM: int = 768
    EMBED_BATCH_SIZE: int = 100

    LLM_PROVIDER: str = "openai"  # openai | ollama
    LLM_MODEL: str = "gpt-3.5-turbo"
    LLM_TEMPERATURE: float = 0.2
    OLLAMA_BASE_URL: str = "http://localhost:11434"
    OLLAMA_MODEL: str = "qwen2.5:7b-instruct"

    PINECONE_API_KEY: str = ""
    PINECONE_INDEX_NAME: str = "ai-chat-rag"
    PINECONE_AUTO_CREATE: bool = False
    PINECONE_CLOUD: str = "aws"
    PINECONE_REGION: str = "us-east-1"
    UPSERT_BATCH_SIZE: int = 100

    UPLOAD_DIR: str = "uploads"
    MAX_UPLOAD_MB: int = 20
    DELETE_AFTER_INGEST: bool = True

    CHUNK_SIZE: int = 1000
    CHUNK_OVERLAP: int = 200
    TOP_K: int = 6
    MAX_TOP_K: int = 20

    # relevance gate; scores are cosine similarity, higher is closer
    RELEVANCE_POLICY: str = "dynamic"  # dynamic | fixed
    MIN_RELEVANCE_SCORE: float = 0.3
    RELATIVE_RELEVANCE_RATIO: float = 0.7
    FIXED_RELEVANCE_THRESHOLD: float = 0.7
    MIN_CONTEXT_CHUNKS: int = 2
    MAX_CONTEXT_CHUNKS: int = 6
    EXCERPT_CHARS: int = 150

    class Config:
        env_file = ".env"
        case_sensitive = True

    @property
    def allowed_origins(self) -> list[str]:
        return [o.strip() for o in self.ALLOWED_ORIGINS.split(",") if o.strip()]

    @property
    def max_upload_bytes(self) -> int:
        return self.MAX_UPLOAD_MB * 1024 * 1024

settings = Settings()
