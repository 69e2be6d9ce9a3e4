"""Domain services package."""

from .aggregation import aggregate_readings, majority_condition
from .fetch_orchestrator import FetchOrchestrator

__all__ = ["aggregate_readings", "majority_condition", "FetchOrchestrator"]
