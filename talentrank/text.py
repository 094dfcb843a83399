"""Text canonicalization shared by every matching step."""
from __future__ import annotations

import re
import unicodedata
from collections import Counter

# Stripped from token edges only; inner characters, in any script, are kept.
_TOKEN_EDGE_PUNCT = ".,;:!?¡¿()[]{}<>\"'`/|*-"
_TAG_RE = re.compile(r"[a-z0-9+#.]{4,}")

TAG_BLACKLIST: frozenset[str] = frozenset({
    "empleo", "trabajo", "peru", "lima", "remote", "remoto", "titulo", "descripcion",
    "with", "para", "that", "this", "from",
})


def normalize(text: str | None) -> str:
    """Lower-case, strip diacritics and collapse whitespace.

    The result is what two strings are compared by everywhere in the
    package, so ``normalize(normalize(x)) == normalize(x)`` must hold.
    """
    if not text:
        return ""
    decomposed = unicodedata.normalize("NFD", str(text).lower())
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return " ".join(stripped.split())


def clean(text: str | None) -> str:
    """Collapse whitespace without changing case; used for display fields."""
    if not text:
        return ""
    return " ".join(str(text).split())


def tokenize(text: str | None) -> set[str]:
    """Whitespace-separated normalized tokens with edge punctuation removed."""
    tokens = set()
    for tok in normalize(text).split():
        tok = tok.strip(_TOKEN_EDGE_PUNCT)
        if tok:
            tokens.add(tok)
    return tokens


def extract_tags(text: str | None, limit: int = 8) -> list[str]:
    """Most frequent meaningful words, highest count first."""
    words = [w.strip(".") for w in _TAG_RE.findall(normalize(text))]
    freq = Counter(w for w in words if len(w) >= 4 and w not in TAG_BLACKLIST)
    return [w for w, _ in freq.most_common(limit)]
