"""Clock adapters."""

from src.infrastructure.adapters.clock.system_time_authority import SystemTimeAuthority

__all__: list[str] = ["SystemTimeAuthority"]
