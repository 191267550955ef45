"""Cluster client backed by the ``kubectl`` binary.

``kubectl`` resolves credentials from the kubeconfig and context, so the
client only forwards ``--kubeconfig``/``--context`` and exchanges JSON on
stdin/stdout. Writes use server-side apply, which makes every ``apply``
an upsert keyed by kind, namespace and name.

Contents:
    * :class:`KubectlClient` - :class:`~meshctl.application.ports.ClusterClient` implementation.
    * :func:`connect_cluster` - Build a client and verify the server is reachable.
"""

from __future__ import annotations

import logging
import re
import subprocess
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, cast

import orjson

from meshctl.domain.errors import ClusterAPIError, ClusterConnectionError
from meshctl.domain.models import ClusterTarget

if TYPE_CHECKING:
    from meshctl.adapters.config.settings import ApplySettings

logger = logging.getLogger(__name__)

#: Field manager recorded by server-side apply.
FIELD_MANAGER = "meshctl"

_REASON_PATTERN = re.compile(r"Error from server \((\w+)\)")

# Cluster-scoped kinds never take a namespace flag.
_CLUSTER_SCOPED = frozenset(
    {
        "Namespace",
        "ClusterRole",
        "ClusterRoleBinding",
        "CustomResourceDefinition",
        "MutatingWebhookConfiguration",
        "ValidatingWebhookConfiguration",
        "PriorityClass",
        "StorageClass",
    }
)


def parse_reason(stderr: str) -> str:
    """Extract the API failure reason from kubectl's stderr.

    Examples:
        >>> parse_reason('Error from server (AlreadyExists): namespaces "x" already exists')
        'AlreadyExists'
        >>> parse_reason("error: unable to connect")
        ''
    """
    match = _REASON_PATTERN.search(stderr)
    return match.group(1) if match else ""


def _format_duration(seconds: float) -> str:
    """Render seconds the way kubectl's ``--request-timeout`` expects.

    Example:
        >>> _format_duration(30.0)
        '30s'
    """
    return f"{seconds:g}s"


@dataclass(frozen=True, slots=True)
class KubectlClient:
    """Cluster client running ``kubectl`` as a subprocess.

    Attributes:
        kubectl: Binary name or path.
        target: Kubeconfig path and context name.
        request_timeout: Per-request timeout in seconds.
    """

    kubectl: str = "kubectl"
    target: ClusterTarget = ClusterTarget()
    request_timeout: float = 30.0

    def _base_args(self) -> list[str]:
        args = [self.kubectl, f"--request-timeout={_format_duration(self.request_timeout)}"]
        if self.target.kubeconfig:
            args.append(f"--kubeconfig={self.target.kubeconfig}")
        if self.target.context:
            args.append(f"--context={self.target.context}")
        return args

    def run(self, args: Sequence[str], *, payload: Mapping[str, Any] | None = None) -> str:
        """Run ``kubectl`` with *args* and return its stdout.

        Raises:
            ClusterAPIError: If kubectl exits non-zero or times out.
            FileNotFoundError: If the kubectl binary does not exist.
        """
        cmd = [*self._base_args(), *args]
        stdin = orjson.dumps(dict(payload)).decode("utf-8") if payload is not None else None
        logger.debug("Running kubectl", extra={"args": list(args)})
        try:
            result = subprocess.run(  # noqa: S603
                cmd,
                input=stdin,
                capture_output=True,
                text=True,
                check=False,
                timeout=self.request_timeout + 5,
            )
        except subprocess.TimeoutExpired as exc:
            raise ClusterAPIError(f"kubectl {' '.join(args)} timed out", reason="Timeout") from exc
        if result.returncode != 0:
            stderr = result.stderr.strip()
            raise ClusterAPIError(stderr or f"kubectl exited with {result.returncode}", reason=parse_reason(stderr))
        return result.stdout

    @staticmethod
    def _namespace_args(kind: str, namespace: str) -> list[str]:
        if namespace and kind not in _CLUSTER_SCOPED:
            return ["--namespace", namespace]
        return []

    @staticmethod
    def _decode(output: str) -> dict[str, Any]:
        try:
            decoded: object = orjson.loads(output)
        except orjson.JSONDecodeError as exc:
            raise ClusterAPIError(f"unexpected kubectl output: {exc}") from exc
        if not isinstance(decoded, dict):
            raise ClusterAPIError("unexpected kubectl output: not an object")
        return cast("dict[str, Any]", decoded)

    def get(self, kind: str, name: str, namespace: str = "") -> dict[str, Any] | None:
        args = ["get", kind, name, *self._namespace_args(kind, namespace), "-o", "json", "--ignore-not-found"]
        output = self.run(args)
        if not output.strip():
            return None
        return self._decode(output)

    def create(self, obj: Mapping[str, Any]) -> dict[str, Any]:
        return self._decode(self.run(["create", "-f", "-", "-o", "json"], payload=obj))

    def apply(self, obj: Mapping[str, Any]) -> dict[str, Any]:
        args = ["apply", "--server-side", "--force-conflicts", f"--field-manager={FIELD_MANAGER}"]
        args += ["-f", "-", "-o", "json"]
        return self._decode(self.run(args, payload=obj))


def connect_cluster(target: ClusterTarget, *, settings: ApplySettings) -> KubectlClient:
    """Build a kubectl client and check that the API server answers.

    Raises:
        ClusterConnectionError: If kubectl is missing or the server cannot
            be reached with the given kubeconfig and context.
    """
    client = KubectlClient(kubectl=settings.kubectl, target=target, request_timeout=settings.request_timeout)
    try:
        client.run(["version", "-o", "json"])
    except FileNotFoundError as exc:
        raise ClusterConnectionError(f"kubectl binary {settings.kubectl!r} not found") from exc
    except ClusterAPIError as exc:
        raise ClusterConnectionError(f"cannot reach cluster: {exc}") from exc
    logger.info(
        "Connected to cluster",
        extra={"kubeconfig": target.kubeconfig or "<default>", "context": target.context or "<current>"},
    )
    return client


__all__ = [
    "FIELD_MANAGER",
    "KubectlClient",
    "connect_cluster",
    "parse_reason",
]
