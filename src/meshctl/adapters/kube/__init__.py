"""Cluster adapter - kubectl client and manifest codec.

Contents:
    * :mod:`.client` - :class:`KubectlClient` and :func:`connect_cluster`
    * :mod:`.manifest` - YAML manifest (de)serialization
"""

from __future__ import annotations

from .client import KubectlClient, connect_cluster
from .manifest import dump_document, dump_manifest, parse_manifest

__all__ = [
    "KubectlClient",
    "connect_cluster",
    "dump_document",
    "dump_manifest",
    "parse_manifest",
]
