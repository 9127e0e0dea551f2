"""
Textmap package for document map analysis.

This is the numerical core that turns cleaned documents into a TF-IDF
matrix, projects it onto principal axes and clusters the projection.
"""

__version__ = '0.1.0'

from textmap.analysis import Analysis, Split, run_analysis, train_test_split
from textmap.components.config import Config, ConfigManager
from textmap.options import (
    AnalysisOptions, KMeansOptions, PCAOptions, SplitOptions, VectorizerOptions
)
