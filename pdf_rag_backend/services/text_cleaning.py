import re
import unicodedata

_hyphen_break_re = re.compile(r"(\w)-\n(\w)")
_trailing_space_re = re.compile(r"[ \t]+\n")
_whitespace_re = re.compile(r"[ \t]+")
_multi_newline_re = re.compile(r"\n{3,}")
# NULs and soft hyphens are common pypdf extraction artefacts
_junk_chars = dict.fromkeys(map(ord, "\x00\u00ad\ufeff"))

def normalize_text(text: str) -> str:
    """Normalise page text from pypdf before chunking."""
    if not text:
        return ""
    text = unicodedata.normalize("NFKC", text).translate(_junk_chars)
    text = text.replace("\r\n", "\n").replace("\r", "\n")

    # "exam-\nple" -> "example"
    text = _hyphen_break_re.sub(r"\1\2", text)

    text = _whitespace_re.sub(" ", text)
    text = _trailing_space_re.sub("\n", text)
    text = _multi_newline_re.sub("\n\n", text)
    return text.strip()
