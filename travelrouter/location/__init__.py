"""
Location reconfiguration for Travel Router.

This module sequences the steps that move the router to a new venue network.
"""

from .orchestrator import (
    LocationOrchestrator,
    OrchestrationResult,
    OrchestratorState,
)

__all__ = [
    "LocationOrchestrator",
    "OrchestrationResult",
    "OrchestratorState",
]
