"""
Monitoring Operator - Admission webhook and lifecycle harness for monitoring resources.

This package provides:
- Validating admission webhooks for PodMonitoring and ServiceMonitoring resources
- Label mapping validation against Prometheus relabeling rules
- A shared-fate actor group that runs the signal watcher, the admission
  server and the reconciliation loop as one process
"""

__version__ = "0.1.0"
