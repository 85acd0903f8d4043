"""
Machine Learning modules for the JobMatch engine.

Submodules:
- embeddings: Text embedding, vector storage and hybrid similarity search
"""
