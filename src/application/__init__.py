"""
Application layer - Use cases and orchestration.

This layer contains:
- Port definitions (interfaces for storage, execution, notification, time)
- Application services (registry, action queue, election engine, facade)
- DTOs returned to callers

IMPORT RULES:
- CAN import from: domain, config
- CANNOT import from: infrastructure, api
"""
