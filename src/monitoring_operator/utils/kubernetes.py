"""
Kubernetes and TLS bootstrap utilities for the monitoring operator.

Certificates for the admission server are issued and rotated externally;
this module only loads them. Kubernetes client configuration is loaded once
at startup and shared with the reconciliation loop.
"""

import logging
import ssl
from pathlib import Path

from kubernetes import config

from monitoring_operator.errors import ConfigurationError

logger = logging.getLogger(__name__)


def load_kubernetes_config(kubeconfig: str = "") -> None:
    """
    Load Kubernetes client configuration.

    An explicit kubeconfig path takes precedence. Otherwise the in-cluster
    configuration is tried first (when running in a pod), falling back to the
    default local kubeconfig for development.

    Args:
        kubeconfig: Optional path to a kubeconfig file

    Raises:
        ConfigurationError: If no configuration could be loaded
    """
    if kubeconfig:
        try:
            config.load_kube_config(config_file=kubeconfig)
        except (config.ConfigException, OSError) as e:
            raise ConfigurationError(
                f"building kubeconfig from {kubeconfig} failed", cause=e
            ) from e
        logger.info(f"Loaded kubeconfig from {kubeconfig}")
        return

    try:
        config.load_incluster_config()
        logger.info("Loaded in-cluster Kubernetes configuration")
    except config.ConfigException:
        try:
            config.load_kube_config()
            logger.info("Loaded kubeconfig from local environment")
        except config.ConfigException as e:
            raise ConfigurationError(
                "building kubeconfig failed",
                user_action="Run in-cluster or set KUBECONFIG",
                cause=e,
            ) from e


def load_tls_context(cert_file: Path, key_file: Path) -> ssl.SSLContext:
    """
    Build a server-side TLS context from certificate files.

    Args:
        cert_file: PEM encoded certificate chain
        key_file: PEM encoded private key

    Returns:
        SSL context for the admission server

    Raises:
        ConfigurationError: If the certificate material cannot be loaded
    """
    context = ssl.create_default_context(ssl.Purpose.CLIENT_AUTH)
    try:
        context.load_cert_chain(certfile=str(cert_file), keyfile=str(key_file))
    except (OSError, ssl.SSLError) as e:
        raise ConfigurationError(
            f"loading TLS certificate {cert_file} failed",
            user_action="Ensure the webhook serving certificate is mounted",
            cause=e,
        ) from e
    logger.debug(f"Loaded TLS certificate from {cert_file}")
    return context
