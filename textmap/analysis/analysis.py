"""
End-to-end analysis of a document collection.

This module ties the math modules together: TF-IDF features, split-aware
PCA and K-means, and turns the results into plain records for export.
"""

import csv
import logging
import time
from typing import Any, Dict, List, Optional, Sequence, Union

import numpy as np
import pandas as pd

from textmap.analysis.split import Split, train_test_split
from textmap.math.clusters import cluster_named_matrix, silhouette
from textmap.math.named_matrix import NamedMatrix
from textmap.math.pca import pca_project_named_matrix
from textmap.math.tfidf import tfidf_named_matrix
from textmap.options import AnalysisOptions
from textmap.text.cleaning import Document

logger = logging.getLogger(__name__)

# Record field -> CSV export header
CSV_COLUMNS = {
    'original': 'Original Text',
    'cleaned': 'Cleaned Text',
    'set': 'Set',
    'cluster': 'Cluster ID',
}


def _as_documents(documents: Sequence[Union[Document, str]]) -> List[Document]:
    result = []
    for i, doc in enumerate(documents):
        if isinstance(doc, Document):
            result.append(doc)
        else:
            # Already-cleaned text with no separate original
            result.append(Document(i, doc, doc))
    return result


class Analysis:
    """
    One analysis run over a fixed set of cleaned documents.
    """

    def __init__(self,
                 documents: Sequence[Union[Document, str]],
                 options: AnalysisOptions,
                 split: Optional[Split] = None):
        """
        Initialize an analysis.

        Args:
            documents: Documents, or cleaned texts
            options: Options for every stage
            split: Train/test split over document positions; sampled with
                options.split when omitted
        """
        self.documents = _as_documents(documents)
        self.options = options
        self.split = split

        # Results
        self.features: Optional[NamedMatrix] = None
        self.pca: Optional[Dict[str, np.ndarray]] = None
        self.proj: Optional[NamedMatrix] = None
        self.assignments: Optional[Dict[Any, int]] = None
        self.clusters: List[Dict] = []
        self.train_silhouette: Optional[float] = None

    @property
    def vocabulary(self) -> List[str]:
        return [] if self.features is None else self.features.colnames()

    @property
    def done(self) -> bool:
        return self.assignments is not None

    def run(self) -> 'Analysis':
        """
        Compute features, projections and clusters.

        Returns:
            self, with results filled in
        """
        n_docs = len(self.documents)
        start_time = time.time()

        if self.split is None:
            self.split = train_test_split(n_docs, self.options.split.train_ratio,
                                          self.options.split.seed)
        self.split.validate(n_docs)
        train = list(self.split.train)

        logger.info(f"Analyzing {n_docs} documents ({len(train)} train, {len(self.split.test)} test)")

        rownames = [doc.index for doc in self.documents]

        # Term weighting
        stage_start = time.time()
        self.features = tfidf_named_matrix([doc.cleaned for doc in self.documents],
                                           self.options.vectorizer, rownames)
        logger.info(f"TF-IDF: {len(self.vocabulary)} terms in {time.time() - stage_start:.2f}s")

        # Dimensionality reduction
        stage_start = time.time()
        pca_opts = self.options.pca
        self.pca, self.proj = pca_project_named_matrix(
            self.features, pca_opts.n_components, train, pca_opts.max_iters, pca_opts.tolerance
        )
        logger.info(f"PCA: {pca_opts.n_components} components in {time.time() - stage_start:.2f}s")

        # Clustering
        stage_start = time.time()
        km_opts = self.options.kmeans
        self.assignments, self.clusters = cluster_named_matrix(
            self.proj, km_opts.k, train, km_opts.max_iters, np.random.default_rng(km_opts.seed)
        )
        labels = np.array([self.assignments[name] for name in rownames])
        self.train_silhouette = silhouette(self.proj.values, labels, train)
        logger.info(f"K-means: k={km_opts.k} in {time.time() - stage_start:.2f}s")

        logger.info(f"Analysis finished in {time.time() - start_time:.2f}s")
        return self

    def _require_done(self) -> None:
        if not self.done:
            raise RuntimeError("Analysis has not been run")

    def to_records(self) -> List[Dict[str, Any]]:
        """
        One export record per document.

        Returns:
            List of {'id', 'original', 'cleaned', 'set', 'vector', 'cluster'}
        """
        self._require_done()
        set_labels = self.split.labels(len(self.documents))
        vectors = self.proj.values

        return [
            {
                'id': doc.index,
                'original': doc.original,
                'cleaned': doc.cleaned,
                'set': set_labels[i],
                'vector': vectors[i].tolist(),
                'cluster': self.assignments[doc.index],
            }
            for i, doc in enumerate(self.documents)
        ]

    def to_dataframe(self) -> pd.DataFrame:
        """Export records as a DataFrame indexed by document id."""
        return pd.DataFrame(self.to_records()).set_index('id')

    def to_csv(self, path: Optional[str] = None) -> Optional[str]:
        """
        Export the cleaned-data table as CSV with every field quoted.

        Columns are Original Text, Cleaned Text, Set and Cluster ID.

        Args:
            path: File to write; when omitted the CSV text is returned

        Returns:
            CSV text if path is None, otherwise None
        """
        frame = self.to_dataframe()[list(CSV_COLUMNS)].rename(columns=CSV_COLUMNS)
        return frame.to_csv(path, index=False, quoting=csv.QUOTE_ALL, lineterminator='\n')

    def features_frame(self) -> pd.DataFrame:
        """The TF-IDF matrix with document ids as index and terms as columns."""
        self._require_done()
        return self.features.to_dataframe()

    def summary(self) -> Dict[str, Any]:
        """
        Headline numbers of the run.

        Returns:
            Dictionary of counts, explained variance, cluster sizes and the
            training silhouette
        """
        self._require_done()
        n_comps = self.options.pca.n_components
        sizes = {c['id']: len(c['members']) for c in self.clusters}

        return {
            'n_documents': len(self.documents),
            'n_train': len(self.split.train),
            'n_test': len(self.split.test),
            'n_terms': len(self.vocabulary),
            'n_components': n_comps,
            'explained_variance': self.pca['explained_variance_ratio'][:n_comps].tolist(),
            'cluster_sizes': sizes,
            'train_silhouette': self.train_silhouette,
        }

    def to_dict(self) -> Dict[str, Any]:
        return {'summary': self.summary(), 'documents': self.to_records()}


def run_analysis(documents: Sequence[Union[Document, str]],
                 options: AnalysisOptions,
                 split: Optional[Split] = None) -> Analysis:
    """
    Build and run an Analysis.

    Args:
        documents: Documents, or cleaned texts
        options: Options for every stage
        split: Optional train/test split

    Returns:
        The finished Analysis
    """
    return Analysis(documents, options, split).run()
