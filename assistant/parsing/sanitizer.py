"""
Fence stripping for model output.

Services often wrap structured output in a fenced block (```json ... ```)
even when asked for raw JSON. sanitize() removes one such wrapper.

Invariants:
- sanitize(sanitize(x)) == sanitize(x)
- Text with no fence marker at either end is returned unchanged
- At most one leading and one trailing marker are removed; text that is
  still fenced after that (nested wrappers) is returned unchanged
"""

import re

FENCE = "```"

# Opening marker with an optional format name ("```", "```json", "``` python").
# "json" may be glued to the payload ("```json{...}"); other names must end
# at whitespace so a bare "```true```" keeps its value.
_LEADING_FENCE_RE = re.compile(
    r"^```[ \t]*(?P<name>json(?![A-Za-z0-9_])|[A-Za-z0-9_+.-]+(?=\s|$))?",
    re.IGNORECASE,
)
_TRAILING_FENCE_RE = re.compile(r"```$")

# Names always treated as a format tag, even with nothing after them.
KNOWN_FORMATS = frozenset({"json", "javascript", "js", "text", "txt", "markdown", "md"})


def _strip_leading_fence(text: str) -> str:
    match = _LEADING_FENCE_RE.match(text)
    if match is None:
        return text

    body = text[match.end():]
    name = match.group("name")
    # A lone unknown word ("```true\n```") is the payload, not a format tag
    if name and name.lower() not in KNOWN_FORMATS:
        rest = _TRAILING_FENCE_RE.sub("", body.strip(), count=1).strip()
        if not rest:
            return text[len(FENCE):]
    return body


def _is_fenced(text: str) -> bool:
    return text.startswith(FENCE) or text.endswith(FENCE)


def sanitize(text: str) -> str:
    """Strip one optional fenced-block wrapper and surrounding whitespace."""
    if text is None:
        return ""

    stripped = text.strip()
    if not _is_fenced(stripped):
        return text

    inner = _strip_leading_fence(stripped)
    inner = _TRAILING_FENCE_RE.sub("", inner, count=1).strip()

    if _is_fenced(inner):
        return text
    return inner
