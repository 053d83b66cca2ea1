"""Scanner utilities.

File selection, provider-tag classification and a small balanced-text
reader for JSX attribute values and object literals.  This is substring
and bracket matching, not parsing.
"""

import os
import re
from typing import Any, Dict, List, Optional, Tuple

from ..migration.models import ProviderTag, is_target_module

# Extension → language mapping
SUPPORTED_EXTENSIONS: Dict[str, str] = {
    ".js": "javascript",
    ".jsx": "javascript",
    ".ts": "typescript",
    ".tsx": "typescript",
    ".mjs": "javascript",
}

# Directories to skip during file walking
SKIP_DIRECTORIES = frozenset({
    "node_modules",
    ".git",
    ".next",
    ".turbo",
    ".vercel",
    "dist",
    "build",
    "out",
    "coverage",
    "storybook-static",
})

# Basenames (without extension) of application bootstrap files
ENTRY_POINT_NAMES = frozenset({"main", "index", "App", "_app", "layout"})

# Module substrings → provider tag, checked in order
_TAG_PATTERNS: Tuple[Tuple[str, ProviderTag], ...] = (
    ("privy", ProviderTag.PRIVY),
    ("reown", ProviderTag.REOWN),
    ("appkit", ProviderTag.REOWN),
    ("web3modal", ProviderTag.WEB3MODAL),
    ("wagmi", ProviderTag.WAGMI),
)

_NUMBER_RE = re.compile(r"^-?\d+(\.\d+)?$")

_OPEN = "{[("
_CLOSE = "}])"


def is_supported_file(file_path: str) -> bool:
    _, ext = os.path.splitext(file_path)
    return ext.lower() in SUPPORTED_EXTENSIONS


def should_skip_directory(dir_name: str) -> bool:
    return dir_name.startswith(".") or dir_name in SKIP_DIRECTORIES


def is_entry_point(file_path: str) -> bool:
    base, ext = os.path.splitext(os.path.basename(file_path))
    return ext.lower() in SUPPORTED_EXTENSIONS and base in ENTRY_POINT_NAMES


def classify_module(module: str, target_package: str) -> ProviderTag:
    """Tag an import source by the wallet integration it belongs to."""
    if is_target_module(module, target_package):
        return ProviderTag.PARA
    lowered = module.lower()
    for pattern, tag in _TAG_PATTERNS:
        if pattern in lowered:
            return tag
    return ProviderTag.OTHER


def read_balanced(text: str, start: int) -> Optional[int]:
    """Index just past the bracket group opening at ``text[start]``.

    Quotes and template strings are skipped.  Returns None when the group
    is not closed within *text*.
    """
    depth = 0
    quote: Optional[str] = None
    i = start
    while i < len(text):
        ch = text[i]
        if quote:
            if ch == "\\":
                i += 2
                continue
            if ch == quote:
                quote = None
        elif ch in "'\"`":
            quote = ch
        elif ch in _OPEN:
            depth += 1
        elif ch in _CLOSE:
            depth -= 1
            if depth == 0:
                return i + 1
        i += 1
    return None


def split_top_level(body: str, separator: str = ",") -> List[str]:
    """Split *body* on *separator* outside brackets and quotes."""
    parts: List[str] = []
    depth = 0
    quote: Optional[str] = None
    current: List[str] = []
    i = 0
    while i < len(body):
        ch = body[i]
        if quote:
            current.append(ch)
            if ch == "\\" and i + 1 < len(body):
                current.append(body[i + 1])
                i += 2
                continue
            if ch == quote:
                quote = None
        elif ch in "'\"`":
            quote = ch
            current.append(ch)
        elif ch in _OPEN:
            depth += 1
            current.append(ch)
        elif ch in _CLOSE:
            depth -= 1
            current.append(ch)
        elif ch == separator and depth == 0:
            parts.append("".join(current))
            current = []
        else:
            current.append(ch)
        i += 1
    if "".join(current).strip():
        parts.append("".join(current))
    return parts


def parse_value(text: str) -> Any:
    """Interpret a JS value: object literals become dicts, quoted text
    becomes the string inside the quotes, anything else is kept as raw
    expression text."""
    text = text.strip()
    if text.startswith("{") and read_balanced(text, 0) == len(text):
        return parse_object_literal(text)
    if len(text) >= 2 and text[0] == text[-1] and text[0] in "'\"`":
        return text[1:-1]
    if text in ("true", "false"):
        return text == "true"
    if _NUMBER_RE.match(text):
        return float(text) if "." in text else int(text)
    return text


def parse_object_literal(text: str) -> Dict[str, Any]:
    """``{ a: 1, b: { c: "x" }, d }`` → ``{"a": 1, "b": {"c": "x"}, "d": "d"}``."""
    body = text.strip()[1:-1]
    result: Dict[str, Any] = {}
    for entry in split_top_level(body):
        entry = entry.strip()
        if not entry or entry.startswith("..."):
            continue
        key, sep, value = entry.partition(":")
        key = key.strip().strip("'\"")
        result[key] = parse_value(value) if sep else key
    return result
