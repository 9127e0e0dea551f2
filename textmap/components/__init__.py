"""
System components for textmap.

This module provides the configuration layer used by the CLI and by
AnalysisOptions.from_config.
"""

from textmap.components.config import Config, ConfigManager, load_config_file
