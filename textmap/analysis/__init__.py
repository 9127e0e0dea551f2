"""
Analysis runs for textmap.

This module provides the train/test sampler and the Analysis that runs
term weighting, PCA and clustering over a document collection.
"""

from textmap.analysis.split import Split, train_test_split
from textmap.analysis.analysis import Analysis, run_analysis
