from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

class CamelModel(BaseModel):
    # snake_case in Python, camelCase on the wire
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

class QueryIn(CamelModel):
    question: str = ""
    namespace: str = "default"
    top_k: int | None = Field(default=None, ge=1)

class Citation(CamelModel):
    id: int                       # matches the [n] bracket in the prompt
    file_name: str
    page: int | None = None
    text: str                     # truncated excerpt
    relevance: float              # cosine similarity, higher is better

class QueryOut(CamelModel):
    success: bool = True
    answer: str
    citations: list[Citation]
    sources: int

class UploadOut(CamelModel):
    success: bool = True
    file_name: str
    chunks: int
    pages: int

class NamespaceOut(CamelModel):
    name: str
    vector_count: int

class NamespaceListOut(CamelModel):
    success: bool = True
    namespaces: list[NamespaceOut]

class MessageOut(CamelModel):
    success: bool = True
    message: str

class ErrorOut(CamelModel):
    success: bool = False
    error: str
