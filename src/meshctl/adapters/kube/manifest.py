"""YAML codec for cluster manifests.

Contents:
    * :func:`dump_manifest` - Objects to multi-document YAML.
    * :func:`parse_manifest` - Multi-document YAML to objects.
    * :func:`dump_document` - One object to a stable, key-sorted YAML document.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, cast

import yaml


def dump_manifest(objects: Sequence[Mapping[str, Any]]) -> str:
    """Serialize cluster objects into multi-document YAML, preserving key order.

    Example:
        >>> print(dump_manifest([{"kind": "Namespace", "metadata": {"name": "a"}}]), end="")
        ---
        kind: Namespace
        metadata:
          name: a
    """
    if not objects:
        return ""
    return yaml.safe_dump_all([dict(obj) for obj in objects], sort_keys=False, explicit_start=True)


def parse_manifest(text: str) -> list[dict[str, Any]]:
    """Parse multi-document YAML into cluster objects, skipping empty documents.

    Raises:
        ValueError: If the text is not valid YAML or a document is not a
            mapping with a ``kind``.

    Example:
        >>> parse_manifest("---\\nkind: Service\\nmetadata: {name: a}\\n---\\n")
        [{'kind': 'Service', 'metadata': {'name': 'a'}}]
    """
    try:
        documents = list(yaml.safe_load_all(text))
    except yaml.YAMLError as exc:
        raise ValueError(f"invalid manifest: {exc}") from exc

    objects: list[dict[str, Any]] = []
    for index, document in enumerate(documents):
        if document is None or document == "":
            continue
        if not isinstance(document, dict) or "kind" not in document:
            raise ValueError(f"invalid manifest: document {index} is not a cluster object")
        objects.append(cast("dict[str, Any]", document))
    return objects


def dump_document(obj: Mapping[str, Any]) -> str:
    """Serialize a single object with sorted keys for stable output.

    Example:
        >>> dump_document({"b": 1, "a": {"d": 2, "c": 3}})
        'a:\\n  c: 3\\n  d: 2\\nb: 1\\n'
    """
    return yaml.safe_dump(dict(obj), sort_keys=True, default_flow_style=False)


__all__ = [
    "dump_document",
    "dump_manifest",
    "parse_manifest",
]
