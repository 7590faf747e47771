"""
schemas/ — Pydantic request/response models for the CRM API

Provides input validation, OpenAPI docs, and consistent error messages
across all endpoints.
"""
