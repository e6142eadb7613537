"""Infrastructure adapters for the governance engine.

Adapters implement the ports defined in the application layer,
providing concrete implementations for external services.
"""

from src.infrastructure.adapters.clock import SystemTimeAuthority

__all__: list[str] = ["SystemTimeAuthority"]
