"""
Code pattern detection.

Fast, language-agnostic keyword checks over raw source text (JavaScript,
TypeScript and Python idioms). Every regex here is linear-time: no nested
quantifiers, no unbounded `.*` between two alternatives, so multi-thousand
line or minified inputs finish promptly.
"""

import re
from typing import Iterator

from .models import CodePatterns


# Comparison operators, but not `=>`, `->`, `<<`, `>>` or `<<=`
COMPARISON_RE = re.compile(r"(?<![<>=\-])[<>]=?(?![<>=])|[=!]==?")

GRAPH_RE = re.compile(
    r"\b(?:graph|vertex|vertices|edges?|nodes?|adj|adjacency\w*|neighbou?rs?)\b",
    re.IGNORECASE,
)
GRAPH_CAMEL_RE = re.compile(r"[a-z](?:Graph|Vertex|Vertices|Edges?|Nodes?|Neighbou?rs?|Adj)")

HASH_RE = re.compile(
    r"\bnew\s+(?:Map|Set|WeakMap|WeakSet)\b"
    r"|\b(?:dict|set|defaultdict|Counter|OrderedDict|HashMap|HashSet)\s*[(<]"
    r"|\.(?:get|has|set|setdefault)\s*\("
    r"|=\s*\{\s*\}"
    r"|\w\[\s*['\"]"
)

LOOP_RE = re.compile(r"\b(?:for|while)\b|\.forEach\s*\(")

QUEUE_TAKE_RE = re.compile(r"\.(?:shift|popleft)\s*\(\s*\)|\.pop\s*\(\s*0\s*\)|\bdequeue\b")
QUEUE_WORD_RE = re.compile(r"\bqueue\b|\benqueue\b|\bdeque\s*\(", re.IGNORECASE)
PUSH_RE = re.compile(r"\.(?:push|append|appendleft|unshift)\s*\(|\benqueue\b")
STACK_TAKE_RE = re.compile(r"\.pop\s*\(\s*\)")
STACK_WORD_RE = re.compile(r"\bstack\b", re.IGNORECASE)

SWAP_RE = re.compile(
    # [a[i], a[j]] = [a[j], a[i]]
    r"\[\s*\w+\s*\[[^\]\n]{0,80}\]\s*,\s*\w+\s*\[[^\]\n]{0,80}\]\s*\]\s*=\s*\["
    # a[i], a[j] = a[j], a[i]
    r"|\b\w+\[[^\]\n]{0,80}\]\s*,\s*\b\w+\[[^\]\n]{0,80}\]\s*=\s*\w+\["
    r"|\bswap\w*\s*\(",
    re.IGNORECASE,
)

DEFINITION_RE = re.compile(
    r"\bfunction\s*\*?\s*(\w+)"
    r"|\bdef\s+(\w+)"
    r"|\b(?:const|let|var)\s+(\w+)\s*=\s*(?:async\s+)?(?:function\b|\([^()\n]*\)\s*(?::\s*[^=\n]{0,120})?=>|\w+\s*=>)"
)
METHOD_RE = re.compile(r"^[ \t]*(?:(?:public|private|protected|static|async)\s+)*(\w+)\s*\([^()\n]*\)\s*(?::[^{\n]{0,120})?\{", re.MULTILINE)
BRACE_RE = re.compile(r"[{}]")

MAX_DEFINITIONS = 500
MAX_BODY_CHARS = 20_000

KEYWORDS = frozenset({
    "if", "for", "while", "switch", "catch", "return", "function", "with",
    "elif", "print", "super", "constructor",
})


def count_loops(text: str) -> int:
    """Number of loop constructs in the text."""
    if not isinstance(text, str):
        return 0
    return len(LOOP_RE.findall(text))


def _brace_body(text: str, start: int) -> str:
    """Text between the first `{` at or after `start` and its matching `}`."""
    open_at = text.find("{", start, start + MAX_BODY_CHARS)
    if open_at == -1:
        return ""
    limit = min(len(text), open_at + MAX_BODY_CHARS)
    depth = 0
    for match in BRACE_RE.finditer(text, open_at, limit):
        depth += 1 if match.group() == "{" else -1
        if depth == 0:
            return text[open_at + 1:match.start()]
    return text[open_at + 1:limit]


def _indented_body(text: str, def_start: int, header_end: int) -> str:
    """Rest of a Python `def` header plus the lines indented under it."""
    line_start = text.rfind("\n", 0, def_start) + 1
    header = text[line_start:def_start]
    indent = len(header) - len(header.lstrip())

    line_end = text.find("\n", def_start)
    if line_end == -1:
        return text[header_end:]

    body_end = line_end
    for line in text[line_end + 1:line_end + 1 + MAX_BODY_CHARS].split("\n"):
        stripped = line.lstrip()
        if stripped and len(line) - len(stripped) <= indent:
            break
        body_end += len(line) + 1
    return text[header_end:body_end]


def _definitions(text: str) -> Iterator[tuple[str, str]]:
    """(name, body) for each function definition, bounded in number."""
    found = 0
    for match in DEFINITION_RE.finditer(text):
        function_name, def_name, bound_name = match.groups()
        if def_name:
            yield def_name, _indented_body(text, match.start(), match.end())
        elif function_name:
            yield function_name, _brace_body(text, match.end())
        else:
            rest = text[match.end():match.end() + MAX_BODY_CHARS].lstrip()
            if rest.startswith("{") or match.group().endswith("function"):
                yield bound_name, _brace_body(text, match.end())
            else:
                # Expression-bodied arrow function
                line_end = text.find("\n", match.end())
                yield bound_name, text[match.end():line_end if line_end != -1 else len(text)]
        found += 1
        if found >= MAX_DEFINITIONS:
            return

    for match in METHOD_RE.finditer(text):
        if match.group(1) in KEYWORDS:
            continue
        yield match.group(1), _brace_body(text, match.end() - 1)
        found += 1
        if found >= MAX_DEFINITIONS:
            return


def _has_recursion(text: str) -> bool:
    """A function whose own body calls it by name is self-recursive."""
    for name, body in _definitions(text):
        if name in KEYWORDS:
            continue
        if re.search(r"\b" + re.escape(name) + r"\s*\(", body):
            return True
    return False


def detect_code_patterns(text: str) -> CodePatterns:
    """
    Detect code patterns to help guide classification.

    Pure and total: empty, non-string or unparseable input gives all-false
    flags, never an exception.
    """
    if not isinstance(text, str) or not text.strip():
        return CodePatterns()

    has_push = PUSH_RE.search(text) is not None

    return CodePatterns(
        has_comparisons=COMPARISON_RE.search(text) is not None,
        has_graph_structure=(
            GRAPH_RE.search(text) is not None or GRAPH_CAMEL_RE.search(text) is not None
        ),
        has_hash_access=HASH_RE.search(text) is not None,
        has_loops=LOOP_RE.search(text) is not None,
        has_recursion=_has_recursion(text),
        has_queue_operations=(
            (QUEUE_TAKE_RE.search(text) is not None and has_push)
            or (QUEUE_WORD_RE.search(text) is not None and has_push and STACK_TAKE_RE.search(text) is None)
        ),
        has_stack_operations=has_push and (
            STACK_TAKE_RE.search(text) is not None or STACK_WORD_RE.search(text) is not None
        ),
        has_array_swaps=SWAP_RE.search(text) is not None,
    )
