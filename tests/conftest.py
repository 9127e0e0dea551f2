"""
Shared fixtures for textmap tests.
"""

import pytest
import sys
import os

# Add the parent directory to the path to import the module
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from textmap.components.config import ConfigManager

CONFIG_ENV_VARS = [
    'TFIDF_MIN_DF', 'TFIDF_MAX_DF', 'TFIDF_NGRAM_MIN', 'TFIDF_NGRAM_MAX',
    'PCA_N_COMPONENTS', 'PCA_MAX_ITERS', 'PCA_TOLERANCE',
    'KMEANS_K', 'KMEANS_MAX_ITERS', 'KMEANS_SEED',
    'SPLIT_TRAIN_RATIO', 'SPLIT_SEED', 'CLEANING_STEPS', 'LOG_LEVEL',
]


@pytest.fixture(autouse=True)
def clean_config(monkeypatch):
    """Fresh configuration for every test, unaffected by the environment."""
    for name in CONFIG_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    ConfigManager.reset()
    yield
    ConfigManager.reset()


@pytest.fixture
def french_comments():
    """Small corpus with two obvious topics."""
    return [
        "le chat noir dort sur le canapé",
        "le chat blanc dort dans le jardin",
        "un chat roux dort au soleil",
        "le petit chat joue avec la souris",
        "la voiture rouge roule sur la route",
        "la voiture bleue roule en ville",
        "une voiture verte roule vite sur la route",
        "la vieille voiture roule lentement",
        "le chien noir dort dans la niche",
        "la voiture du voisin roule la nuit",
    ]
