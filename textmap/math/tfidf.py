"""
TF-IDF term weighting for textmap.

This module builds an n-gram vocabulary filtered by document frequency and
weights every document against it with smoothed inverse document frequency,
producing one L2-normalized row per document.
"""

import logging
from collections import Counter
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple, Union

import numpy as np

from textmap.errors import EmptyVocabularyError
from textmap.math.named_matrix import NamedMatrix
from textmap.options import VectorizerOptions

logger = logging.getLogger(__name__)


def tokenize(text: str) -> List[str]:
    """
    Lowercase a document and split it on whitespace.

    Args:
        text: Cleaned document text

    Returns:
        List of tokens (never contains empty strings)
    """
    return text.lower().split()


def ngrams(tokens: Sequence[str], ngram_min: int, ngram_max: int) -> List[str]:
    """
    Generate all contiguous n-grams for n in [ngram_min, ngram_max].

    N-grams are joined with single spaces. There is no padding, so a
    document shorter than n tokens has no n-grams of that length.

    Args:
        tokens: Document tokens
        ngram_min: Smallest n-gram length
        ngram_max: Largest n-gram length

    Returns:
        N-gram multiset as a list, shorter n first
    """
    grams = []
    for n in range(ngram_min, ngram_max + 1):
        for i in range(len(tokens) - n + 1):
            grams.append(" ".join(tokens[i:i + n]))
    return grams


def document_frequency(doc_terms: Iterable[Iterable[str]]) -> Counter:
    """
    Count the documents each term occurs in at least once.

    Args:
        doc_terms: Terms of each document

    Returns:
        Counter from term to document count
    """
    df = Counter()
    for terms in doc_terms:
        df.update(set(terms))
    return df


def smoothed_idf(df: Union[int, np.ndarray], n_docs: int) -> Union[float, np.ndarray]:
    """
    Smoothed inverse document frequency, ln((N + 1) / (df + 1)) + 1.

    Strictly positive and non-increasing in df for a fixed N.
    """
    return np.log((n_docs + 1) / (np.asarray(df, dtype=float) + 1)) + 1


def build_vocabulary(df: Dict[str, int],
                     n_docs: int,
                     min_df: int,
                     max_df: float) -> List[str]:
    """
    Keep terms with df >= min_df and df / N <= max_df, sorted.

    Args:
        df: Document frequency per term
        n_docs: Number of documents
        min_df: Minimum document count
        max_df: Maximum document ratio

    Returns:
        Lexicographically sorted vocabulary
    """
    vocabulary = sorted(
        term for term, count in df.items()
        if count >= min_df and count / n_docs <= max_df
    )

    if not vocabulary:
        raise EmptyVocabularyError(
            f"Vocabulary is empty after filtering {len(df)} candidate terms "
            f"(min_df={min_df}, max_df={max_df}, documents={n_docs})"
        )

    return vocabulary


def l2_normalize_rows(matrix: np.ndarray) -> np.ndarray:
    """
    Scale each row to unit L2 norm; all-zero rows stay zero.
    """
    norms = np.linalg.norm(matrix, axis=1)
    scale = np.where(norms > 0, norms, 1.0)
    return matrix / scale[:, np.newaxis]


def fit_transform(documents: Sequence[str],
                  options: Union[VectorizerOptions, Dict[str, Any]]) -> Tuple[np.ndarray, List[str]]:
    """
    Build the vocabulary and the TF-IDF matrix for a corpus.

    Args:
        documents: Cleaned document texts
        options: Vectorizer options (a dict is validated into VectorizerOptions)

    Returns:
        Tuple of (matrix of shape (n_docs, n_terms), vocabulary)
    """
    if not isinstance(options, VectorizerOptions):
        options = VectorizerOptions.model_validate(options)

    n_docs = len(documents)
    if n_docs == 0:
        raise EmptyVocabularyError("Cannot build a vocabulary from zero documents")

    doc_terms = [ngrams(tokenize(doc), options.ngram_min, options.ngram_max)
                 for doc in documents]

    df = document_frequency(doc_terms)
    vocabulary = build_vocabulary(df, n_docs, options.min_df, options.max_df)
    logger.debug(f"Vocabulary kept {len(vocabulary)} of {len(df)} candidate terms")

    term_index = {term: j for j, term in enumerate(vocabulary)}
    idf = smoothed_idf(np.array([df[term] for term in vocabulary]), n_docs)

    tf = np.zeros((n_docs, len(vocabulary)))
    for i, terms in enumerate(doc_terms):
        for term, count in Counter(terms).items():
            j = term_index.get(term)
            if j is not None:
                tf[i, j] = count

    return l2_normalize_rows(tf * idf), vocabulary


def tfidf_named_matrix(documents: Sequence[str],
                       options: Union[VectorizerOptions, Dict[str, Any]],
                       rownames: Optional[Sequence[Any]] = None) -> NamedMatrix:
    """
    Run fit_transform and wrap the result with document and term names.

    Args:
        documents: Cleaned document texts
        options: Vectorizer options
        rownames: Document ids (defaults to positions)

    Returns:
        NamedMatrix with one row per document and one column per term
    """
    matrix, vocabulary = fit_transform(documents, options)
    return NamedMatrix(matrix, rownames, vocabulary)
