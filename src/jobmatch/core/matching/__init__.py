"""
Candidate-job matching: deterministic scoring and generative orchestration.
"""

from .matching_engine import MatchingEngine, get_matching_engine
from .orchestrator import GenerativeMatcher, MatchOrchestrator

__all__ = [
    "MatchingEngine",
    "get_matching_engine",
    "GenerativeMatcher",
    "MatchOrchestrator",
]
