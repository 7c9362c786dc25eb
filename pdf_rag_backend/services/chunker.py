"""Page-aware text chunking."""

from dataclasses import dataclass

from langchain_text_splitters import RecursiveCharacterTextSplitter

# paragraph -> line -> sentence -> word -> hard cut
SEPARATORS = ["\n\n", "\n", ". ", " ", ""]


@dataclass(frozen=True)
class PageChunk:
    text: str
    page: int
    chunk_index: int


def make_splitter(chunk_size: int, chunk_overlap: int) -> RecursiveCharacterTextSplitter:
    return RecursiveCharacterTextSplitter(
        chunk_size=chunk_size,
        chunk_overlap=chunk_overlap,
        length_function=len,
        separators=SEPARATORS,
        keep_separator="end",
    )


def chunk_pages(pages: list[dict], chunk_size: int, chunk_overlap: int) -> list[PageChunk]:
    """Split each page on its own so every chunk keeps an exact page number.

    Args:
        pages: ``[{"page": n, "text": ...}]`` as returned by the extractor.
        chunk_size: Maximum characters per chunk.
        chunk_overlap: Characters shared between consecutive chunks of a page.

    Returns:
        Chunks in document order, with ``chunk_index`` running across pages.
    """
    splitter = make_splitter(chunk_size, chunk_overlap)
    chunks: list[PageChunk] = []
    for p in pages:
        for text in splitter.split_text(p["text"]):
            text = text.strip()
            if not text:
                continue
            chunks.append(PageChunk(text=text, page=p["page"], chunk_index=len(chunks)))
    return chunks
