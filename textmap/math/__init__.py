"""
Numerical core: TF-IDF weighting, PCA via Jacobi rotations, K-means.
"""
