"""
Kubernetes manifest artifacts — bundled templates plus per-app overlays.

Overlays replace lists wholesale, so every container entry here is
complete rather than a patch over the template's container.
"""

from __future__ import annotations

import logging
from typing import Any

from deploy_node_app.core.models.answers import DeployAnswers
from deploy_node_app.core.models.artifact import TargetArtifact
from deploy_node_app.core.reconcile.merge import dump_yaml
from deploy_node_app.core.services.tags import DeployTags

logger = logging.getLogger(__name__)

CONFIG_DIR = "inf"

_RESOURCES = {
    "requests": {"cpu": "1m", "memory": "32Mi"},
    "limits": {"cpu": "100m", "memory": "64Mi"},
}


def _labels(app: str, extra: dict[str, str]) -> dict[str, str]:
    return {"app": app, "deployedBy": "deploy-node-app", **extra}


def backend_deployment(
    app: str,
    answers: DeployAnswers,
    tags: DeployTags,
    *,
    handle_ui: bool = False,
    labels: dict[str, str] | None = None,
    command: list[str] | None = None,
) -> TargetArtifact:
    name = f"{app}-backend" if handle_ui else app
    filename = "backend-deployment.yaml" if handle_ui else "deployment.yaml"
    pod_labels = _labels(app, labels or {})
    container: dict[str, Any] = {
        "name": name,
        "image": tags.hash,
        "imagePullPolicy": "Always",
        "ports": [{"name": answers.protocol, "containerPort": answers.port}],
        "resources": _RESOURCES,
    }
    if command:
        container["command"] = command
    return TargetArtifact(
        path=f"{CONFIG_DIR}/{filename}",
        template="backend-deployment.yaml",
        properties={
            "metadata": {"name": name, "labels": pod_labels},
            "spec": {
                "selector": {"matchLabels": {"app": app}},
                "template": {
                    "metadata": {"labels": pod_labels},
                    "spec": {"containers": [container]},
                },
            },
        },
        reason="Backend deployment",
    )


def backend_service(
    app: str,
    answers: DeployAnswers,
    *,
    handle_ui: bool = False,
    labels: dict[str, str] | None = None,
) -> TargetArtifact:
    name = f"{app}-backend" if handle_ui else app
    filename = "backend-service.yaml" if handle_ui else "service.yaml"
    return TargetArtifact(
        path=f"{CONFIG_DIR}/{filename}",
        template="backend-service.yaml",
        properties={
            "metadata": {"name": name, "labels": _labels(app, labels or {})},
            "spec": {
                "selector": {"app": app},
                "ports": [{"port": answers.port, "protocol": "TCP", "targetPort": answers.port}],
            },
        },
        reason="Backend service",
    )


def nginx_config(app: str, port: int) -> str:
    """Nginx server block serving the built UI and proxying /api to the backend."""
    return (
        "error_log stderr info;\n"
        "server {\n"
        "  access_log stdout;\n"
        "  listen 80;\n"
        "  root /app/build;\n"
        "  location /api {\n"
        f"    proxy_pass http://{app}-backend:{port};\n"
        "  }\n"
        "}\n"
    )


def frontend_configmap(app: str, answers: DeployAnswers) -> TargetArtifact:
    return TargetArtifact(
        path=f"{CONFIG_DIR}/frontend-configmap.yaml",
        template="frontend-configmap.yaml",
        properties={
            "metadata": {"name": f"{app}-frontend"},
            "data": {"default.conf": nginx_config(app, answers.port)},
        },
        reason="Nginx config for the UI",
    )


def frontend_deployment(
    app: str,
    tags: DeployTags,
    *,
    labels: dict[str, str] | None = None,
) -> TargetArtifact:
    pod_labels = _labels(app, labels or {})
    return TargetArtifact(
        path=f"{CONFIG_DIR}/frontend-deployment.yaml",
        template="frontend-deployment.yaml",
        properties={
            "metadata": {"name": f"{app}-frontend", "labels": pod_labels},
            "spec": {
                "selector": {"matchLabels": {"app": app}},
                "template": {
                    "metadata": {"labels": pod_labels},
                    "spec": {
                        "volumes": [{"name": "nginx-config", "configMap": {"name": f"{app}-frontend"}}],
                        "containers": [
                            {
                                "name": f"{app}-frontend",
                                "image": tags.hash,
                                "ports": [{"containerPort": 80}],
                                "volumeMounts": [
                                    {"name": "nginx-config", "mountPath": "/etc/nginx/conf.d"}
                                ],
                                "resources": _RESOURCES,
                            }
                        ],
                    },
                },
            },
        },
        reason="UI deployment",
    )


def frontend_service(
    app: str,
    *,
    host: str = "",
    labels: dict[str, str] | None = None,
) -> TargetArtifact:
    metadata: dict[str, Any] = {"name": f"{app}-frontend", "labels": _labels(app, labels or {})}
    if host:
        metadata["annotations"] = {
            "getambassador.io/config": dump_yaml({
                "apiVersion": "ambassador/v1",
                "kind": "Mapping",
                "name": f"{app}-frontend",
                "prefix": "/",
                "service": f"http://{app}-frontend:80",
                "host": host,
                "timeout_ms": 10000,
                "use_websocket": True,
            })
        }
    return TargetArtifact(
        path=f"{CONFIG_DIR}/frontend-service.yaml",
        template="frontend-service.yaml",
        properties={"metadata": metadata, "spec": {"selector": {"app": app}}},
        reason="UI service",
    )


def k8s_artifacts(
    app: str,
    answers: DeployAnswers,
    tags: DeployTags,
    *,
    handle_ui: bool = False,
    labels: dict[str, str] | None = None,
    host: str = "",
    command: list[str] | None = None,
) -> list[TargetArtifact]:
    """All Kubernetes manifests for the app, in the order they are reconciled."""
    artifacts = [
        backend_deployment(app, answers, tags, handle_ui=handle_ui, labels=labels, command=command),
        backend_service(app, answers, handle_ui=handle_ui, labels=labels),
    ]
    if handle_ui:
        artifacts += [
            frontend_configmap(app, answers),
            frontend_deployment(app, tags, labels=labels),
            frontend_service(app, host=host, labels=labels),
        ]
    logger.debug("Planned %d manifest(s) for %s", len(artifacts), app)
    return artifacts


def resource_paths(artifacts: list[TargetArtifact]) -> list[str]:
    """Kustomization ``resources`` entries, relative to the config dir."""
    prefix = f"{CONFIG_DIR}/"
    return ["./" + a.path[len(prefix):] for a in artifacts if a.path.startswith(prefix)]
