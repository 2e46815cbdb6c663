"""FastAPI dependency injection providers.

This module provides dependency functions for injecting the session registry
and the current browser session into route handlers.
"""

from typing import Optional

from fastapi import Request

from bizniz.orchestration.registry import SessionRegistry
from bizniz.orchestration.session import TurnaroundSession

# Global instance for singleton pattern
_registry: Optional[SessionRegistry] = None


def get_registry() -> SessionRegistry:
    """
    Get the session registry.

    Created lazily on first use; tests replace it with set_registry().
    """
    global _registry

    if _registry is None:
        _registry = SessionRegistry()

    return _registry


def set_registry(registry: SessionRegistry) -> None:
    """Set the global registry instance."""
    global _registry
    _registry = registry


def reset_dependencies() -> None:
    """
    Reset all global dependency instances.

    Useful for testing or application shutdown.
    """
    global _registry
    _registry = None


async def get_session(request: Request) -> TurnaroundSession:
    """Resolve the orchestrator for the session cookie set by the middleware."""
    return await get_registry().get_or_create(request.state.session_id)
