"""
JobMatch Engine

Candidate/job matching and semantic job search: a backend-agnostic vector
store with hybrid ranking and a deterministic compatibility scorer.
"""

__app_name__ = "JobMatch"
__version__ = "0.1.0"
