"""
hybrid_matrix.utilities - Shared helpers.
"""
