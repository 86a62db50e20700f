from .orchestrator import OrchestratorState, TrackingOrchestrator, merge_parcels

__all__ = ["OrchestratorState", "TrackingOrchestrator", "merge_parcels"]
