"""
Prompt and citation assembly for grounded answers.

The context block numbers chunks `[1]`, `[2]`, ... in the order they are
passed in, and `build_citations` emits ids in that same order, so a bracket
number in the answer always points at the citation with the same id.
"""

from pdf_rag_backend.schemas.rag import Citation
from pdf_rag_backend.utils.pinecone_meta import page_from_metadata

NO_DOCUMENTS_MESSAGE = (
    "No documents have been uploaded to this namespace yet. "
    "Please upload a PDF before asking questions."
)
NOT_FOUND_MESSAGE = "I could not find this information in the uploaded documents."

SYSTEM_PROMPT = "You are a grounded document assistant. You never use knowledge outside the provided context."


def build_context(matches: list[dict]) -> str:
    return "\n\n".join(
        f"[{i}] {m['metadata'].get('text', '')}" for i, m in enumerate(matches, start=1)
    )


def build_prompt(question: str, matches: list[dict]) -> str:
    context_block = build_context(matches)

    return f"""
Answer the question using ONLY the numbered context below.

Rules:
- Use only information stated in the context. Do not add outside knowledge.
- If the context does not contain the answer, reply exactly: "{NOT_FOUND_MESSAGE}"
- Cite every claim with the bracket number of its source, e.g. [1] or [2][3].
- Do not cite numbers that are not in the context.

Context:
{context_block}

Question: {question}
Answer:
""".strip()


def build_messages(question: str, matches: list[dict]) -> list[dict]:
    return [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": build_prompt(question, matches)},
    ]


def excerpt(text: str, limit: int = 150) -> str:
    text = " ".join(text.split())
    if len(text) <= limit:
        return text
    return text[:limit].rstrip() + "..."


def build_citations(matches: list[dict], excerpt_chars: int = 150) -> list[Citation]:
    citations = []
    for i, m in enumerate(matches, start=1):
        md = m["metadata"]
        citations.append(Citation(
            id=i,
            file_name=(md.get("file_name") or "").strip() or "Unknown",
            page=page_from_metadata(md),
            text=excerpt(md.get("text", ""), excerpt_chars),
            relevance=round(m["score"], 4),
        ))
    return citations
