"""Test configuration helpers for ensuring local imports resolve."""
from __future__ import annotations

import re
import sys
from email.header import decode_header
from pathlib import Path

import pytest


def _ensure_project_root_on_path() -> None:
    project_root = Path(__file__).resolve().parents[1]
    if str(project_root) not in sys.path:
        sys.path.insert(0, str(project_root))


_ensure_project_root_on_path()

ENCODED_WORD = re.compile(r"=\?[^?\s]+\?[QqBb]\?[^?\s]*\?=")


def decode_encoded_words(text: str) -> str:
    """Decodes every encoded-word in ``text`` and concatenates the results."""
    parts = []
    for token in ENCODED_WORD.findall(text):
        for data, charset in decode_header(token):
            parts.append(data.decode(charset))
    return "".join(parts)


@pytest.fixture
def decode():
    return decode_encoded_words
