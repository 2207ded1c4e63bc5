"""Manages the loading and validation of encoder configuration.

This module defines the `Config` dataclass, the read-only container for every
lookup table the pipeline consults: the line-length budget, the MIME charset to
transfer-scheme table and the field-name to encoding-policy table. It also
provides the `load_config` function, which reads overrides from a
`config.yaml` file and merges them over the built-in defaults.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, get_args

import yaml

from .types import FieldKind, Scheme

__all__ = [
    "Config",
    "DEFAULT_CHARSET_ENCODINGS",
    "DEFAULT_FIELD_KINDS",
    "DEFAULT_CONFIG",
    "MIN_LINE_LENGTH",
    "load_config",
]

# "=?" + 1-char charset + "?X?" + 1 char of content + "?=" is never shorter.
MIN_LINE_LENGTH = 12

DEFAULT_CHARSET_ENCODINGS: Dict[str, Optional[Scheme]] = {
    "us-ascii": None,
    "iso-8859-1": "Q",
    "iso-8859-2": "Q",
    "iso-8859-5": "Q",
    "iso-8859-7": "Q",
    "iso-8859-8": "Q",
    "iso-8859-9": "Q",
    "koi8-r": "Q",
    "iso-2022-jp": "B",
    "iso-2022-kr": "B",
    "euc-kr": "B",
    "gb2312": "B",
    "big5": "B",
    "utf-8": "B",
}

_ADDRESS_FIELDS = (
    "reply-to", "from", "sender",
    "resent-reply-to", "resent-from", "resent-sender",
    "to", "resent-to", "cc", "resent-cc", "bcc", "resent-bcc", "dcc",
    "mail-followup-to", "mail-reply-to",
)
_VERBATIM_FIELDS = (
    "newsgroups", "followup-to", "message-id", "date",
    "content-type", "content-transfer-encoding", "content-disposition", "content-id",
)

DEFAULT_FIELD_KINDS: Dict[str, FieldKind] = {
    **{name: "address-list" for name in _ADDRESS_FIELDS},
    "in-reply-to": "in-reply-to",
    "references": "in-reply-to",
    "mime-version": "structured",
    "user-agent": "structured",
    **{name: "verbatim" for name in _VERBATIM_FIELDS},
}

_FIELD_KIND_NAMES = frozenset(get_args(FieldKind))
_SCHEME_NAMES = frozenset(get_args(Scheme))


@dataclass(frozen=True)
class Config:
    """
    A typed, read-only configuration object for the header encoder.

    Every table is exposed through a `MappingProxyType` so that one instance can
    be shared by concurrent encoding calls without coordination. Instances are
    normally created by `load_config`; `DEFAULT_CONFIG` carries the built-in
    tables.

    Attributes:
        max_line_length: The column budget of a physical header line.
        default_mime_charset: The MIME charset used when no narrower charset
                              covers a word. ``None`` disables the fallback,
                              leaving such words unresolved.
        charset_encodings: Lower-case MIME charset name to ``"Q"``, ``"B"`` or
                           ``None`` (7-bit, emitted without encoding).
        field_kinds: Lower-case field name to the encoding policy applied to
                     its body. Names absent from the table are unstructured.
        strict: When true, text that cannot be carried by any transfer scheme
                raises `UnencodableCharsetError` instead of being emitted raw.
    """
    max_line_length: int = 76
    default_mime_charset: Optional[str] = "utf-8"
    charset_encodings: Mapping[str, Optional[Scheme]] = field(
        default_factory=lambda: MappingProxyType(dict(DEFAULT_CHARSET_ENCODINGS))
    )
    field_kinds: Mapping[str, FieldKind] = field(
        default_factory=lambda: MappingProxyType(dict(DEFAULT_FIELD_KINDS))
    )
    strict: bool = False

    def scheme_for(self, charset: Optional[str]) -> Optional[Scheme]:
        """Returns the transfer scheme of ``charset``, or ``None`` if it has none or is unknown."""
        if charset is None:
            return None
        return self.charset_encodings.get(charset.lower())

    def field_kind(self, field_name: str) -> FieldKind:
        """Returns the encoding policy for ``field_name`` (case-insensitive)."""
        return self.field_kinds.get(field_name.strip().lower(), "unstructured")


DEFAULT_CONFIG = Config()


def _merge_charset_encodings(overrides: Any, path: str) -> Dict[str, Optional[Scheme]]:
    if not isinstance(overrides, dict):
        raise TypeError(f"'charset_encodings' in {path} must be a mapping.")
    merged = dict(DEFAULT_CHARSET_ENCODINGS)
    for name, scheme in overrides.items():
        if scheme is not None:
            scheme = str(scheme).upper()
            if scheme not in _SCHEME_NAMES:
                raise ValueError(f"Unknown transfer scheme {scheme!r} for charset {name!r} in {path}")
        merged[str(name).lower()] = scheme
    return merged


def _merge_field_kinds(overrides: Any, path: str) -> Dict[str, FieldKind]:
    if not isinstance(overrides, dict):
        raise TypeError(f"'field_kinds' in {path} must be a mapping.")
    merged = dict(DEFAULT_FIELD_KINDS)
    for name, kind in overrides.items():
        if kind not in _FIELD_KIND_NAMES:
            raise ValueError(f"Unknown field kind {kind!r} for field {name!r} in {path}")
        merged[str(name).lower()] = kind
    return merged


def load_config(path: str = "config.yaml") -> Config:
    """
    Loads and validates a configuration file into a single Config object.

    The YAML document only needs to name the settings it changes. The
    `charset_encodings` and `field_kinds` tables are merged over the built-in
    defaults, so a file can add one field or re-map one charset without
    restating the rest.

    Args:
        path: The path to the `config.yaml` file.

    Returns:
        A fully populated and validated `Config` object.

    Raises:
        FileNotFoundError: If the specified file cannot be found.
        ValueError: If the YAML cannot be parsed or a value is out of range.
        TypeError: If the root of the YAML file, or one of its tables, is not a
                   dictionary.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            y = yaml.safe_load(f)
    except FileNotFoundError:
        raise FileNotFoundError(f"Configuration file not found at: {path}")
    except yaml.YAMLError as e:
        raise ValueError(f"Error parsing YAML file at {path}: {e}")

    if y is None:
        y = {}
    if not isinstance(y, dict):
        raise TypeError(f"Configuration file {path} must be a dictionary.")

    max_line_length = int(y.get("max_line_length", DEFAULT_CONFIG.max_line_length))
    if max_line_length < MIN_LINE_LENGTH:
        raise ValueError(
            f"max_line_length in {path} must be at least {MIN_LINE_LENGTH}, got {max_line_length}"
        )

    default_mime_charset = y.get("default_mime_charset", DEFAULT_CONFIG.default_mime_charset)
    if default_mime_charset is not None:
        default_mime_charset = str(default_mime_charset).lower()

    return Config(
        max_line_length=max_line_length,
        default_mime_charset=default_mime_charset,
        charset_encodings=MappingProxyType(
            _merge_charset_encodings(y.get("charset_encodings", {}), path)
        ),
        field_kinds=MappingProxyType(_merge_field_kinds(y.get("field_kinds", {}), path)),
        strict=bool(y.get("strict", False)),
    )
