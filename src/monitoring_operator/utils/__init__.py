"""
Utils package - Utility modules for monitoring operator functionality.

Contains helper modules for:
- Compiling label mappings into Prometheus relabel configurations
- Loading Kubernetes client configuration and TLS material
"""

from monitoring_operator.utils.relabel import (
    RelabelConfig,
    label_mapping_relabel_configs,
    sanitize_label_name,
)

__all__ = [
    "RelabelConfig",
    "label_mapping_relabel_configs",
    "sanitize_label_name",
]
