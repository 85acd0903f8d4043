"""
Core business logic modules for the JobMatch engine.

Submodules:
- matching: Candidate-job compatibility scoring and match orchestration
"""
