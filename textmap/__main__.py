"""
Main entry point for textmap.

Reads documents from a text file (one per line) or a CSV column, runs the
analysis and writes the summary and per-document records as JSON, or the
cleaned-data table as CSV, to stdout or a file.
"""

import argparse
import json
import logging
import sys
from typing import List, Optional

import pandas as pd

from textmap.analysis import run_analysis
from textmap.components.config import ConfigManager, load_config_file
from textmap.options import AnalysisOptions
from textmap.text.cleaning import build_pipeline, clean_documents

logger = logging.getLogger(__name__)


def setup_logging(level: str = 'INFO') -> None:
    """
    Set up logging.

    Args:
        level: Logging level
    """
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler(sys.stderr)
        ]
    )


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parse command line arguments.

    Returns:
        Parsed arguments
    """
    parser = argparse.ArgumentParser(description='Map a document collection with TF-IDF, PCA and K-means')

    parser.add_argument(
        'input',
        help='Text file with one document per line, or a .csv file'
    )

    parser.add_argument(
        '--column',
        help='CSV column holding the text (defaults to the first column)'
    )

    parser.add_argument(
        '--delimiter',
        default=',',
        help='CSV delimiter'
    )

    parser.add_argument(
        '--config',
        help='Path to configuration file'
    )

    parser.add_argument(
        '--log-level',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
        help='Logging level (defaults to logging.level from the configuration)'
    )

    parser.add_argument('--k', type=int, help='Number of clusters')
    parser.add_argument('--n-components', type=int, help='Number of principal components')
    parser.add_argument('--seed', type=int, help='Seed for both the split and K-means')
    parser.add_argument('--train-ratio', type=float, help='Fraction of documents used for fitting')
    parser.add_argument('--clean', help='Comma-separated built-in cleaning steps')

    parser.add_argument(
        '--format',
        default='json',
        choices=['json', 'csv'],
        help='Output format'
    )

    parser.add_argument(
        '--output',
        help='Write results to this file instead of stdout'
    )

    return parser.parse_args(argv)


def read_texts(path: str, column: Optional[str] = None, delimiter: str = ',') -> List[str]:
    """
    Read raw texts from a file.

    Args:
        path: Input path; .csv files are parsed with pandas
        column: CSV column to use
        delimiter: CSV delimiter

    Returns:
        List of texts
    """
    if path.endswith('.csv'):
        frame = pd.read_csv(path, sep=delimiter, dtype=str, keep_default_na=False)
        column = column or frame.columns[0]
        if column not in frame.columns:
            raise KeyError(f"Column '{column}' not in {list(frame.columns)}")
        return frame[column].tolist()

    with open(path, 'r', encoding='utf-8') as f:
        return [line.rstrip('\n') for line in f if line.strip()]


def build_overrides(args: argparse.Namespace) -> dict:
    """
    Collect configuration overrides from the config file and flags.
    """
    overrides = {}

    if args.config:
        overrides.update(load_config_file(args.config))

    def put(section, key, value):
        if value is not None:
            overrides.setdefault(section, {})[key] = value

    put('kmeans', 'k', args.k)
    put('pca', 'n-components', args.n_components)
    put('kmeans', 'seed', args.seed)
    put('split', 'seed', args.seed)
    put('split', 'train-ratio', args.train_ratio)
    if args.clean is not None:
        put('cleaning', 'steps', [s.strip() for s in args.clean.split(',') if s.strip()])

    return overrides


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point.
    """
    args = parse_args(argv)

    config = ConfigManager.get_config(build_overrides(args))
    setup_logging(args.log_level or config.get('logging.level', 'warning'))
    options = AnalysisOptions.from_config(config)

    steps = build_pipeline(config.get('cleaning.steps') or [])
    documents = clean_documents(read_texts(args.input, args.column, args.delimiter), steps)

    if not documents:
        logger.error("No documents remaining after cleaning")
        return 1

    analysis = run_analysis(documents, options)

    if args.format == 'csv':
        text = analysis.to_csv()
    else:
        text = json.dumps(analysis.to_dict(), indent=2) + '\n'

    if args.output:
        with open(args.output, 'w', encoding='utf-8', newline='') as f:
            f.write(text)
        logger.info(f"Wrote {args.format} results to {args.output}")
    else:
        sys.stdout.write(text)
    return 0


if __name__ == '__main__':
    sys.exit(main())
