import re
from typing import Optional

_BLOCK_ELEMENTS = re.compile(
    r"<\s*(script|style|iframe|object|embed)\b[^>]*>.*?<\s*/\s*\1\s*>",
    re.IGNORECASE | re.DOTALL,
)
_COMMENTS = re.compile(r"<!--.*?(?:-->|$)", re.DOTALL)
# Attributes, event handlers included, go with the tag that holds them.
_TAGS = re.compile(r"</?[a-zA-Z!/?][^<>]*>")
# Only a value that is itself a script URI; the words in prose are left alone.
_LEADING_SCHEME = re.compile(
    r"\A[\s\"']*(?:"
    r"j\s*a\s*v\s*a\s*s\s*c\s*r\s*i\s*p\s*t\s*:"
    r"|v\s*b\s*s\s*c\s*r\s*i\s*p\s*t\s*:"
    r"|d\s*a\s*t\s*a\s*:\s*text/html"
    r")",
    re.IGNORECASE,
)
_ANGLE_BRACKETS = re.compile(r"[<>]")


def _strip_once(value: str) -> str:
    value = _BLOCK_ELEMENTS.sub("", value)
    value = _COMMENTS.sub("", value)
    value = _TAGS.sub("", value)
    value = _LEADING_SCHEME.sub("", value)
    return _ANGLE_BRACKETS.sub("", value)


def sanitize_text(value: Optional[str]) -> Optional[str]:
    """
    Strip markup that could run when the value is rendered.

    Repeats until nothing changes, so ``<scr<script>ipt>`` does not
    reassemble and a second call is a no-op. Text without markup is
    returned as is, surrounding whitespace included.
    """
    if value is None:
        return None

    # Every pass that changes the value makes it shorter.
    current = value
    while True:
        stripped = _strip_once(current)
        if stripped == current:
            return current
        current = stripped
