"""
Configuration management for textmap.

This module provides functionality for managing configuration,
including loading from environment variables, files and default values.
The analysis core never reads defaults itself; every default lives here.
"""

import os
import json
import logging
import threading
from typing import Any, Dict, List, Optional
from copy import deepcopy
import yaml

# Set up logging
logger = logging.getLogger(__name__)


def to_int(value: Any) -> Optional[int]:
    """
    Convert a value to an integer.

    Args:
        value: Value to convert

    Returns:
        Integer value, or None if conversion failed
    """
    if value is None:
        return None

    try:
        return int(value)
    except (ValueError, TypeError):
        return None


def to_float(value: Any) -> Optional[float]:
    """
    Convert a value to a float.

    Args:
        value: Value to convert

    Returns:
        Float value, or None if conversion failed
    """
    if value is None:
        return None

    try:
        return float(value)
    except (ValueError, TypeError):
        return None


def to_seed(value: Any, name: str) -> Optional[int]:
    """
    Convert a seed value to an integer.

    Unlike to_int, a value that is set but not an integer raises instead of
    becoming None, which would silently mean fresh entropy.

    Args:
        value: Value to convert
        name: Setting name used in the error message

    Returns:
        Integer seed, or None if value is None
    """
    if value is None:
        return None

    try:
        return int(value)
    except (ValueError, TypeError):
        raise ValueError(f"{name} must be an integer seed, got {value!r}")


def to_list(value: Any, separator: str = ',') -> Optional[List[str]]:
    """
    Convert a value to a list.

    Args:
        value: Value to convert
        separator: Separator for string values

    Returns:
        List value, or None if conversion failed
    """
    if value is None:
        return None

    if isinstance(value, list):
        return value

    if isinstance(value, str):
        return [item.strip() for item in value.split(separator) if item.strip()]

    return None


def load_config_file(filepath: str) -> Dict[str, Any]:
    """
    Load configuration overrides from a file.

    Args:
        filepath: Path to a .json, .yaml or .yml file

    Returns:
        Configuration dictionary
    """
    if filepath.endswith('.json'):
        with open(filepath, 'r') as f:
            return json.load(f) or {}
    elif filepath.endswith('.yaml') or filepath.endswith('.yml'):
        with open(filepath, 'r') as f:
            return yaml.safe_load(f) or {}
    else:
        raise ValueError(f"Unsupported configuration file format: {filepath}")


class Config:
    """
    Configuration manager for textmap.
    """

    def __init__(self, overrides: Optional[Dict[str, Any]] = None):
        """
        Initialize configuration.

        Args:
            overrides: Optional configuration overrides
        """
        self._lock = threading.RLock()
        self._config = {}
        self._initialized = False

        # Load configuration
        self.load_config(overrides)

    def load_config(self, overrides: Optional[Dict[str, Any]] = None) -> None:
        """
        Load configuration from all sources.

        Args:
            overrides: Optional configuration overrides
        """
        with self._lock:
            # Start with default configuration
            config = self._get_defaults()

            # Apply environment variables
            config = self._apply_env_vars(config)

            # Apply overrides
            if overrides:
                config = self._apply_overrides(config, overrides)

            self._config = config
            self._initialized = True

            logger.info("Configuration loaded")

    def _get_defaults(self) -> Dict[str, Any]:
        """
        Get default configuration values.

        Returns:
            Default configuration
        """
        return {
            # Term weighting
            'vectorizer': {
                'min-df': 1,          # minimum document count
                'max-df': 1.0,        # maximum document ratio
                'ngram-min': 1,
                'ngram-max': 1
            },

            # Dimensionality reduction
            'pca': {
                'n-components': 2,
                'max-iters': 5000,    # Jacobi rotations
                'tolerance': 1e-8     # off-diagonal magnitude
            },

            # Clustering
            'kmeans': {
                'k': 3,
                'max-iters': 100,
                'seed': None
            },

            # Train/test sampling
            'split': {
                'train-ratio': 0.8,
                'seed': None
            },

            # Text cleaning (built-in step names, applied in order)
            'cleaning': {
                'steps': []
            },

            # Logging
            'logging': {
                'level': 'warn'
            }
        }

    def _apply_env_vars(self, config: Dict[str, Any]) -> Dict[str, Any]:
        """
        Apply environment variables to configuration.

        Args:
            config: Current configuration

        Returns:
            Updated configuration
        """
        # Make a copy
        config = deepcopy(config)

        # Vectorizer
        config['vectorizer']['min-df'] = to_int(os.environ.get('TFIDF_MIN_DF', config['vectorizer']['min-df']))
        config['vectorizer']['max-df'] = to_float(os.environ.get('TFIDF_MAX_DF', config['vectorizer']['max-df']))
        config['vectorizer']['ngram-min'] = to_int(os.environ.get('TFIDF_NGRAM_MIN', config['vectorizer']['ngram-min']))
        config['vectorizer']['ngram-max'] = to_int(os.environ.get('TFIDF_NGRAM_MAX', config['vectorizer']['ngram-max']))

        # PCA
        config['pca']['n-components'] = to_int(os.environ.get('PCA_N_COMPONENTS', config['pca']['n-components']))
        config['pca']['max-iters'] = to_int(os.environ.get('PCA_MAX_ITERS', config['pca']['max-iters']))
        config['pca']['tolerance'] = to_float(os.environ.get('PCA_TOLERANCE', config['pca']['tolerance']))

        # K-means
        config['kmeans']['k'] = to_int(os.environ.get('KMEANS_K', config['kmeans']['k']))
        config['kmeans']['max-iters'] = to_int(os.environ.get('KMEANS_MAX_ITERS', config['kmeans']['max-iters']))
        config['kmeans']['seed'] = to_seed(os.environ.get('KMEANS_SEED', config['kmeans']['seed']), 'KMEANS_SEED')

        # Split
        config['split']['train-ratio'] = to_float(os.environ.get('SPLIT_TRAIN_RATIO', config['split']['train-ratio']))
        config['split']['seed'] = to_seed(os.environ.get('SPLIT_SEED', config['split']['seed']), 'SPLIT_SEED')

        # Cleaning
        config['cleaning']['steps'] = to_list(os.environ.get('CLEANING_STEPS', config['cleaning']['steps']))

        # Logging
        config['logging']['level'] = os.environ.get('LOG_LEVEL', config['logging']['level']).lower()

        return config

    def _apply_overrides(self, config: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
        """
        Apply configuration overrides.

        Args:
            config: Current configuration
            overrides: Configuration overrides

        Returns:
            Updated configuration
        """
        # Make a copy
        config = deepcopy(config)

        # Helper function for deep update
        def deep_update(d, u):
            for k, v in u.items():
                if isinstance(v, dict) and k in d and isinstance(d[k], dict):
                    d[k] = deep_update(d[k], v)
                else:
                    d[k] = v
            return d

        return deep_update(config, deepcopy(overrides))

    def get(self, path: str, default: Any = None) -> Any:
        """
        Get a configuration value.

        Args:
            path: Configuration path (dot-separated)
            default: Default value if not found

        Returns:
            Configuration value, or default if not found
        """
        if not self._initialized:
            self.load_config()

        value = self._config

        for component in path.split('.'):
            if isinstance(value, dict) and component in value:
                value = value[component]
            else:
                return default

        return value

    def set(self, path: str, value: Any) -> None:
        """
        Set a configuration value.

        Args:
            path: Configuration path (dot-separated)
            value: Configuration value
        """
        with self._lock:
            if not self._initialized:
                self.load_config()

            components = path.split('.')
            config = self._config

            for component in components[:-1]:
                if component not in config:
                    config[component] = {}

                config = config[component]

            config[components[-1]] = value

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert configuration to a dictionary.

        Returns:
            Configuration dictionary
        """
        if not self._initialized:
            self.load_config()

        return deepcopy(self._config)

    def save_to_file(self, filepath: str) -> None:
        """
        Save configuration to a file.

        Args:
            filepath: Path to save configuration
        """
        if not self._initialized:
            self.load_config()

        # Determine file format from extension
        if filepath.endswith('.json'):
            with open(filepath, 'w') as f:
                json.dump(self._config, f, indent=2)
        elif filepath.endswith('.yaml') or filepath.endswith('.yml'):
            with open(filepath, 'w') as f:
                yaml.dump(self._config, f, default_flow_style=False)
        else:
            raise ValueError(f"Unsupported file format: {filepath}")

    def load_from_file(self, filepath: str) -> None:
        """
        Load configuration from a file, on top of defaults and environment.

        Args:
            filepath: Path to load configuration from
        """
        self.load_config(load_config_file(filepath))


class ConfigManager:
    """
    Singleton manager for configuration.
    """

    _instance = None
    _lock = threading.RLock()

    @classmethod
    def get_config(cls, overrides: Optional[Dict[str, Any]] = None) -> Config:
        """
        Get the configuration instance.

        Args:
            overrides: Optional configuration overrides

        Returns:
            Config instance
        """
        with cls._lock:
            if cls._instance is None:
                cls._instance = Config(overrides)
            elif overrides:
                cls._instance.load_config(overrides)

            return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Drop the current instance so the next call reloads."""
        with cls._lock:
            cls._instance = None
