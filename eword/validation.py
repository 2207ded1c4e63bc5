from __future__ import annotations

import re
from typing import Any, Dict, Iterator, List, Tuple

from .charsets import is_ascii
from .config import Config

__all__ = ["iter_lines", "validate"]

_ADJACENT_EWORDS = re.compile(r"\?==\?[^?\s]+\?[QqBb]\?")
_FIELD_NAME_PREFIX = re.compile(r"^[!-9;-~]+:")


def iter_lines(encoded: str) -> Iterator[Tuple[int, str]]:
    """
    Yields the physical lines of an encoded header with their indices.

    Args:
        encoded: Folded header text, one or more fields.

    Yields:
        A tuple ``(line_idx, line)`` for every line, with trailing ``\\r``
        stripped. A trailing newline does not produce an empty last line.
    """
    lines = encoded.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    for i, line in enumerate(lines):
        yield i, line.rstrip("\r")


def _is_atomic(line: str) -> bool:
    """True when ``line`` holds a single unbreakable token, after any field name."""
    body = _FIELD_NAME_PREFIX.sub("", line, count=1)
    return len(body.split()) <= 1


def validate(encoded: str, cfg: Config) -> Dict[str, Any]:
    """
    Performs a series of sanity checks on folded header output.

    The checks mirror the guarantees the Folder makes:
    -   No line is longer than ``cfg.max_line_length`` unless it carries a
        single atomic token that cannot be split any further.
    -   Continuation lines start with exactly one space.
    -   No two encoded-words touch without whitespace between them.
    -   No non-ASCII character is left in the output.

    Args:
        encoded: The output of `encode_field` or `encode_header`.
        cfg: The `Config` the text was encoded with.

    Returns:
        A dictionary summarizing the validation results, containing the total
        `issue_count` and a list of `issues`, where each issue is a
        dictionary detailing the problem.
    """
    issues: List[Dict[str, Any]] = []

    for i, line in iter_lines(encoded):
        if len(line) > cfg.max_line_length and not _is_atomic(line):
            issues.append({
                "type": "line_too_long_error",
                "line": i,
                "length": len(line),
                "message": f"Line {i} is {len(line)} characters long (max is {cfg.max_line_length})."
            })

        if line[:1] == "\t" or line[:2] in ("  ", " \t"):
            issues.append({
                "type": "continuation_indent_warning",
                "line": i,
                "message": f"Continuation line {i} does not start with exactly one space."
            })

        for match in _ADJACENT_EWORDS.finditer(line):
            issues.append({
                "type": "adjacent_encoded_words_error",
                "line": i,
                "offset": match.start(),
                "message": f"Line {i} has two encoded-words with no whitespace between them at offset {match.start()}."
            })

        if not is_ascii(line):
            issues.append({
                "type": "non_ascii_error",
                "line": i,
                "message": f"Line {i} contains non-ASCII characters."
            })

    return {"issue_count": len(issues), "issues": issues}
