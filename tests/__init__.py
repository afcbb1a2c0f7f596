"""
Tests package - Test suite for the monitoring operator.

Contains:
- unit/: Unit tests for individual components
- fixtures/: Sample monitoring resources and admission reviews
"""
