"""
Kubernetes Secret output for the refreshed token.

Stores the token, base64-encoded, under one key of a namespaced Secret:

- Secret exists: the key must already be present in its data; the value is
  replaced and the Secret is merge-patched.
- Secret missing: an Opaque Secret holding only that key is created.

Both writes use the ``photon/rte-refresh-token`` field manager.

The API client uses the in-cluster service account when running in a pod,
and the local kubeconfig otherwise (optionally with an explicit context
and/or cluster).

CHANGELOG:
- 2026-10-16: Send Secret patches as JSON merge patches
- 2026-10-16: Initial creation

TODO:
- None
"""

from __future__ import annotations

import base64
import logging
import os
from dataclasses import dataclass
from pathlib import Path

import yaml
from kubernetes import client, config
from kubernetes.client.rest import ApiException
from kubernetes.config import ConfigException

logger = logging.getLogger(__name__)

FIELD_MANAGER = "photon/rte-refresh-token"
DEFAULT_NAMESPACE = "default"
MERGE_PATCH = "application/merge-patch+json"


class KubeSecretError(Exception):
    """Base class for Secret update errors."""


class InvalidSecretError(KubeSecretError):
    def __init__(self, secret_name: str) -> None:
        super().__init__(f"invalid secret {secret_name}")
        self.secret_name = secret_name


class SecretKeyNotFoundError(KubeSecretError):
    def __init__(self, secret_name: str, secret_key: str) -> None:
        super().__init__(
            f"key '{secret_key}' not found when attempting to patch secret {secret_name}"
        )
        self.secret_name = secret_name
        self.secret_key = secret_key


@dataclass
class KubeSecretOptions:
    """Where to store the token.

    Attributes:
        secret_name: Name of the Secret.
        secret_key: Key of the Secret data holding the token.
        namespace: Namespace of the Secret (default ``default``).
        context: kubeconfig context to use outside a cluster.
        cluster: kubeconfig cluster to use outside a cluster.
    """

    secret_name: str
    secret_key: str
    namespace: str | None = None
    context: str | None = None
    cluster: str | None = None


def encode_token(token: str) -> str:
    return base64.b64encode(token.encode("utf-8")).decode("ascii")


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------


def _kubeconfig_path() -> Path:
    env = os.environ.get("KUBECONFIG")
    if env:
        return Path(env.split(os.pathsep)[0]).expanduser()
    return Path(config.kube_config.KUBE_CONFIG_DEFAULT_LOCATION).expanduser()


def _load_kubeconfig(context: str | None, cluster: str | None) -> None:
    if cluster is None:
        config.load_kube_config(context=context)
        return

    # Point the selected context at the requested cluster.
    with _kubeconfig_path().open(encoding="utf-8") as fh:
        kubeconfig = yaml.safe_load(fh)
    context_name = context or kubeconfig.get("current-context")
    for entry in kubeconfig.get("contexts") or []:
        if entry.get("name") == context_name:
            entry.setdefault("context", {})["cluster"] = cluster
            break
    else:
        raise ConfigException(f"context {context_name} not found in kubeconfig")
    config.load_kube_config_from_dict(kubeconfig, context=context_name)


def load_api(context: str | None = None, cluster: str | None = None) -> client.CoreV1Api:
    """Build a CoreV1Api client.

    Uses the in-cluster configuration when available, the kubeconfig
    otherwise.

    Raises:
        ConfigException: If no usable configuration is found.
    """
    try:
        config.load_incluster_config()
        logger.info("Using in-cluster Kubernetes configuration")
    except ConfigException:
        _load_kubeconfig(context, cluster)
        logger.info(
            "Using kubeconfig Kubernetes configuration context=%s cluster=%s",
            context,
            cluster,
        )
    return client.CoreV1Api()


# ---------------------------------------------------------------------------
# Secret operations
# ---------------------------------------------------------------------------


def store_token(api: client.CoreV1Api, token: str, opts: KubeSecretOptions) -> None:
    """Patch or create the Secret described by *opts* with *token*."""
    namespace = opts.namespace or DEFAULT_NAMESPACE

    try:
        secret = api.read_namespaced_secret(opts.secret_name, namespace)
    except ApiException as exc:
        if exc.status != 404:
            raise
        secret = None

    if secret is None:
        create_secret(api, namespace, opts.secret_name, opts.secret_key, token)
    else:
        patch_secret(api, namespace, secret, opts.secret_key, token)


def patch_secret(
    api: client.CoreV1Api,
    namespace: str,
    secret: client.V1Secret,
    secret_key: str,
    token: str,
) -> None:
    """Replace *secret_key* in an existing Secret and merge-patch it.

    Raises:
        InvalidSecretError: If the Secret has no data.
        SecretKeyNotFoundError: If *secret_key* is not in the Secret data.
    """
    secret_name = secret.metadata.name
    data = secret.data
    if data is None:
        raise InvalidSecretError(secret_name)
    if secret_key not in data:
        raise SecretKeyNotFoundError(secret_name, secret_key)

    data = dict(data)
    data[secret_key] = encode_token(token)
    logger.info("Patching secret name=%s key=%s", secret_name, secret_key)

    api.patch_namespaced_secret(
        secret_name,
        namespace,
        {"metadata": {"name": secret_name}, "data": data},
        field_manager=FIELD_MANAGER,
        _content_type=MERGE_PATCH,
    )


def create_secret(
    api: client.CoreV1Api,
    namespace: str,
    secret_name: str,
    secret_key: str,
    token: str,
) -> None:
    """Create an Opaque Secret holding *token* under *secret_key*."""
    logger.info("Creating secret name=%s key=%s", secret_name, secret_key)

    body = client.V1Secret(
        api_version="v1",
        kind="Secret",
        metadata=client.V1ObjectMeta(name=secret_name),
        data={secret_key: encode_token(token)},
        type="Opaque",
    )
    api.create_namespaced_secret(namespace, body, field_manager=FIELD_MANAGER)


def exec_kube_secret(token: str, opts: KubeSecretOptions) -> None:
    """Entry for the ``kube-secret`` output command."""
    api = load_api(opts.context, opts.cluster)
    store_token(api, token, opts)
