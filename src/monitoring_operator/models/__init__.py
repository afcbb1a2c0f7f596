"""
Models package - Pydantic models for type-safe resource handling.

Defines data models for:
- The admission review envelope (request, response, decision)
- PodMonitoring and ServiceMonitoring resources and their label mappings
"""
