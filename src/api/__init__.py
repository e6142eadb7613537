"""
API layer - HTTP concerns for the governance engine.

This layer contains:
- Pydantic response models
- RFC 7807 rendering of governance failures

IMPORT RULES:
- CAN import from: application
- CANNOT import from: infrastructure directly
"""
