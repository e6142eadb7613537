"""
Infrastructure layer - Adapters for the governance engine.

This layer contains:
- In-memory stubs for every application port
- The system clock adapter
- Observability (structlog configuration, correlation ids)

IMPORT RULES:
- CAN import from: domain, application
- Implements ports defined in application layer
"""
