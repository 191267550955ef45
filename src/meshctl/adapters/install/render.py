"""Render the desired cluster objects of a resolved install configuration.

Every enabled component becomes a workload plus the objects it needs
(service account, service, mesh config). ``values.<addon>.enabled`` turns
on the bundled addons. Objects carry the revision label so several
revisions can live side by side in one namespace.
"""

from __future__ import annotations

from typing import Any

from meshctl.domain.models import REVISION_LABEL, ResolvedConfig

from .model import ComponentSpec, InstallSpec

MANAGED_BY_LABEL = "app.kubernetes.io/managed-by"
MANAGED_BY = "meshctl"

_ADDONS: dict[str, tuple[str, int]] = {
    "prometheus": ("prom/prometheus:v2.53.0", 9090),
    "grafana": ("grafana/grafana:11.1.0", 3000),
}


def _suffix(name: str, revision: str) -> str:
    return f"{name}-{revision}" if revision else name


def _labels(app: str, revision: str) -> dict[str, str]:
    return {
        "app": app,
        REVISION_LABEL: revision or "default",
        MANAGED_BY_LABEL: MANAGED_BY,
    }


def _metadata(name: str, namespace: str, labels: dict[str, str]) -> dict[str, Any]:
    return {"name": name, "namespace": namespace, "labels": dict(labels)}


def _container(name: str, image: str, ports: list[int], args: list[str] | None = None) -> dict[str, Any]:
    container: dict[str, Any] = {
        "name": name,
        "image": image,
        "ports": [{"containerPort": port} for port in ports],
    }
    if args:
        container["args"] = args
    return container


def _deployment(
    name: str, namespace: str, labels: dict[str, str], replicas: int, container: dict[str, Any], account: str = ""
) -> dict[str, Any]:
    pod_spec: dict[str, Any] = {"containers": [container]}
    if account:
        pod_spec["serviceAccountName"] = account
    return {
        "apiVersion": "apps/v1",
        "kind": "Deployment",
        "metadata": _metadata(name, namespace, labels),
        "spec": {
            "replicas": replicas,
            "selector": {"matchLabels": {"app": labels["app"], REVISION_LABEL: labels[REVISION_LABEL]}},
            "template": {"metadata": {"labels": dict(labels)}, "spec": pod_spec},
        },
    }


def _service(
    name: str, namespace: str, labels: dict[str, str], ports: list[int], service_type: str = "ClusterIP"
) -> dict[str, Any]:
    return {
        "apiVersion": "v1",
        "kind": "Service",
        "metadata": _metadata(name, namespace, labels),
        "spec": {
            "type": service_type,
            "selector": {"app": labels["app"], REVISION_LABEL: labels[REVISION_LABEL]},
            "ports": [{"name": f"port-{port}", "port": port, "targetPort": port} for port in ports],
        },
    }


def _service_account(name: str, namespace: str, labels: dict[str, str]) -> dict[str, Any]:
    return {"apiVersion": "v1", "kind": "ServiceAccount", "metadata": _metadata(name, namespace, labels)}


def _render_controller(spec: InstallSpec, component: ComponentSpec, namespace: str) -> list[dict[str, Any]]:
    name = _suffix("mesh-controller", spec.revision)
    labels = _labels("mesh-controller", spec.revision)
    global_values = spec.values.get("global")
    log_level = global_values.get("logLevel", "info") if isinstance(global_values, dict) else "info"
    mesh_config = {
        "apiVersion": "v1",
        "kind": "ConfigMap",
        "metadata": _metadata(_suffix("mesh-config", spec.revision), namespace, labels),
        "data": {"logLevel": str(log_level)},
    }
    container = _container(
        "controller",
        f"{spec.hub}/controller:{spec.tag}",
        [15010, 15012, 15017],
        ["--revision", spec.revision or "default", "--mesh-config", mesh_config["metadata"]["name"]],
    )
    return [
        _service_account(name, namespace, labels),
        mesh_config,
        _deployment(name, namespace, labels, component.replicas, container, account=name),
        _service(name, namespace, labels, [15010, 15012, 443]),
    ]


def _render_gateway(
    spec: InstallSpec, component: ComponentSpec, namespace: str, app: str, service_type: str
) -> list[dict[str, Any]]:
    labels = _labels(app, spec.revision)
    args = ["gateway", "--revision", spec.revision or "default"]
    container = _container("proxy", f"{spec.hub}/proxy:{spec.tag}", [8080, 8443], args)
    return [
        _service_account(app, namespace, labels),
        _deployment(app, namespace, labels, component.replicas, container, account=app),
        _service(app, namespace, labels, [80, 443], service_type),
    ]


def _render_cni(spec: InstallSpec, component: ComponentSpec, namespace: str) -> list[dict[str, Any]]:
    labels = _labels("mesh-cni-node", spec.revision)
    container = _container("install-cni", f"{spec.hub}/install-cni:{spec.tag}", [])
    return [
        _service_account("mesh-cni", namespace, labels),
        {
            "apiVersion": "apps/v1",
            "kind": "DaemonSet",
            "metadata": _metadata("mesh-cni-node", namespace, labels),
            "spec": {
                "selector": {"matchLabels": {"app": "mesh-cni-node"}},
                "template": {
                    "metadata": {"labels": dict(labels)},
                    "spec": {"serviceAccountName": "mesh-cni", "containers": [container]},
                },
            },
        },
    ]


def _render_addons(spec: InstallSpec, namespace: str) -> list[dict[str, Any]]:
    objects: list[dict[str, Any]] = []
    for addon, (image, port) in _ADDONS.items():
        settings = spec.values.get(addon)
        if not isinstance(settings, dict) or settings.get("enabled") is not True:
            continue
        labels = _labels(addon, spec.revision)
        objects.append(_deployment(addon, namespace, labels, 1, _container(addon, image, [port])))
        objects.append(_service(addon, namespace, labels, [port]))
    return objects


def render_objects(resolved: ResolvedConfig) -> list[dict[str, Any]]:
    """Compute the desired cluster objects of *resolved*.

    Example:
        >>> from meshctl.adapters.install.resolver import resolve_config
        >>> objects = render_objects(resolve_config([], []))
        >>> sorted({obj["kind"] for obj in objects})
        ['ConfigMap', 'Deployment', 'Service', 'ServiceAccount']
    """
    spec = InstallSpec.model_validate(resolved.spec)
    components = spec.components
    objects: list[dict[str, Any]] = []

    if components.controller.enabled:
        namespace = components.controller.namespace or resolved.namespace
        objects.extend(_render_controller(spec, components.controller, namespace))
    if components.ingress_gateway.enabled:
        namespace = components.ingress_gateway.namespace or resolved.namespace
        objects.extend(
            _render_gateway(spec, components.ingress_gateway, namespace, "mesh-ingressgateway", "LoadBalancer")
        )
    if components.egress_gateway.enabled:
        namespace = components.egress_gateway.namespace or resolved.namespace
        objects.extend(_render_gateway(spec, components.egress_gateway, namespace, "mesh-egressgateway", "ClusterIP"))
    if components.cni.enabled:
        objects.extend(_render_cni(spec, components.cni, components.cni.namespace or "kube-system"))

    objects.extend(_render_addons(spec, resolved.namespace))
    return objects


__all__ = [
    "MANAGED_BY",
    "MANAGED_BY_LABEL",
    "render_objects",
]
