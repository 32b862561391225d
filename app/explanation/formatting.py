from __future__ import annotations

import re

_PARAGRAPH_BREAK = re.compile(r"\n{2,}")


def to_paragraph_html(text: str) -> str:
    """Wrap blank-line separated blocks in ``<p>`` and single newlines in ``<br>``.

    LaTeX delimiters are left as they are so a client-side renderer can pick them up.
    """
    paragraphs = [p.strip() for p in _PARAGRAPH_BREAK.split(text or "")]
    return "\n".join(f"<p>{p.replace(chr(10), '<br>')}</p>" for p in paragraphs if p)


def format_explanation(text: str, fmt: str = "plain") -> str:
    fmt = fmt.lower().strip()
    if fmt == "html":
        return to_paragraph_html(text)
    if fmt == "plain":
        return text
    raise ValueError(f"Unknown EXPLANATION_FORMAT={fmt!r}")
