"""Provides utility functions for loading and saving header fields.

Two input formats are understood. A JSON document stores the fields as a list
of ``"Name: value"`` strings under a "fields" key; anything else is read as a
raw RFC 822 header block, one field per line with folded continuation lines.
Output is always written in the JSON form by `save_fields`, or as a plain
header block by the CLI.
"""
import json
from typing import List

from .encoder import split_fields


def load_fields(path: str) -> List[str]:
    """
    Loads raw header fields from a JSON file or a header-block text file.

    A file whose first non-blank character is ``{`` is parsed as JSON and must
    carry a "fields" list of strings. Any other file is split into fields with
    `split_fields`, which stops at the first empty line.

    Args:
        path: The path to the input file.

    Returns:
        The raw fields, in file order.

    Raises:
        FileNotFoundError: If the file at the specified path does not exist.
        ValueError: If the file looks like JSON but cannot be decoded.
        TypeError: If the JSON structure is incorrect (e.g., "fields" key is
                   missing or not a list, or an item in the list is not a
                   string).
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            content = f.read()
    except FileNotFoundError:
        raise FileNotFoundError(f"Header file not found at: {path}")

    if not content.lstrip().startswith("{"):
        return split_fields(content)

    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        raise ValueError(f"Error decoding JSON from {path}: {e}")

    items = data.get("fields")
    if not isinstance(items, list):
        raise TypeError(f"Expected a 'fields' key with a list of strings in {path}")

    for i, item in enumerate(items):
        if not isinstance(item, str):
            raise TypeError(f"Field item at index {i} in {path} is not a string.")
    return items


def save_fields(path: str, fields: List[str]) -> None:
    """
    Saves encoded header fields to a JSON file.

    The root of the JSON is a dictionary with a single key, "fields", holding
    the list of field strings (folds kept as ``\\n``). The output is indented
    for human readability.

    Args:
        path: The destination path for the output JSON file.
        fields: The fields to save.
    """
    data = {"fields": list(fields)}

    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, ensure_ascii=False, indent=2)
