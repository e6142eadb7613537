"""
Team Treasury Governance Engine

Role-gated multisig approval of treasury actions and deterministic
board elections for teams that manage shared funds.

Layers:
- domain: models, events and errors (no I/O)
- application: ports, services and DTOs
- infrastructure: in-memory stubs, clock adapter, observability
- api: pydantic response models and error rendering
- bootstrap: dependency wiring
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
