"""
Error taxonomy for the RAG service.

Every error carries the HTTP status it maps to; the handlers in main.py turn
them into `{"success": false, "error": ...}` responses.
"""


class RagError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(RagError):
    status_code = 400


class ConfigurationError(RagError):
    pass


class ExtractionError(RagError):
    pass


class EmbeddingError(RagError):
    pass


class StorageError(RagError):
    pass


class GenerationError(RagError):
    pass
