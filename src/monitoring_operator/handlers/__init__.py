"""
Handlers package - Contains the Kopf event handlers for monitoring resources.

- monitoring.py: PodMonitoring and ServiceMonitoring observation
"""
