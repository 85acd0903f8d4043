"""
Data layer for the JobMatch engine.

Submodules:
- models: Pydantic value objects shared by the stores, scorers and services
"""
