"""
hybrid_matrix.core - Link model, persistence and validation.
"""
