"""
Orchestration - per-browser session state and action sequencing.

Example:
    registry = SessionRegistry()
    session = await registry.get_or_create(session_id)
    await session.search("Sushi Restaurant", "Springfield")
"""

from bizniz.orchestration.registry import SessionRegistry
from bizniz.orchestration.session import TurnaroundSession

__all__ = ["SessionRegistry", "TurnaroundSession"]
