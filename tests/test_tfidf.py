"""
Tests for the TF-IDF module.
"""

import pytest
import numpy as np
import sys
import os

# Add the parent directory to the path to import the module
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from textmap.errors import EmptyVocabularyError
from textmap.math.tfidf import (
    tokenize, ngrams, document_frequency, smoothed_idf, build_vocabulary,
    l2_normalize_rows, fit_transform, tfidf_named_matrix
)
from textmap.options import VectorizerOptions


UNIGRAMS = {'min_df': 1, 'max_df': 1.0, 'ngram_min': 1, 'ngram_max': 1}


class TestTokenization:
    """Tests for tokenizing and n-gram generation."""

    def test_tokenize(self):
        """Lowercases and splits on any whitespace."""
        assert tokenize("Le  Chat\tNoir\n") == ['le', 'chat', 'noir']
        assert tokenize("   ") == []

    def test_ngrams(self):
        """Contiguous n-grams without padding."""
        tokens = ['a', 'b', 'c']

        assert ngrams(tokens, 1, 1) == ['a', 'b', 'c']
        assert ngrams(tokens, 2, 2) == ['a b', 'b c']
        assert ngrams(tokens, 1, 3) == ['a', 'b', 'c', 'a b', 'b c', 'a b c']

        # Shorter documents produce no n-grams of that length
        assert ngrams(['a'], 2, 3) == []

    def test_document_frequency_counts_documents(self):
        """A term repeated within one document counts once."""
        df = document_frequency([['a', 'a', 'b'], ['a'], ['c']])

        assert df['a'] == 2
        assert df['b'] == 1
        assert df['c'] == 1


class TestIdf:
    """Tests for the smoothed idf."""

    def test_idf_positive_and_decreasing(self):
        """idf > 0 and non-increasing in df for fixed N."""
        n_docs = 10
        values = smoothed_idf(np.arange(1, n_docs + 1), n_docs)

        assert np.all(values > 0)
        assert np.all(np.diff(values) < 0)

    def test_idf_value(self):
        """Matches ln((N+1)/(df+1)) + 1."""
        assert np.isclose(smoothed_idf(1, 3), np.log(4 / 2) + 1)
        # Term in every document still has weight 1
        assert np.isclose(smoothed_idf(3, 3), 1.0)


class TestVocabulary:
    """Tests for document-frequency filtering."""

    def test_filters_and_sorts(self):
        """Keeps min_df <= df and df/N <= max_df, sorted."""
        df = {'zeta': 2, 'alpha': 1, 'mid': 3, 'common': 4}

        assert build_vocabulary(df, 4, 1, 1.0) == ['alpha', 'common', 'mid', 'zeta']
        assert build_vocabulary(df, 4, 2, 1.0) == ['common', 'mid', 'zeta']
        assert build_vocabulary(df, 4, 1, 0.5) == ['alpha', 'zeta']

    def test_empty_vocabulary(self):
        """Filters removing everything raise EmptyVocabularyError."""
        with pytest.raises(EmptyVocabularyError):
            build_vocabulary({'a': 1, 'b': 1}, 2, 2, 1.0)


class TestFitTransform:
    """Tests for the full vectorizer."""

    def test_french_example(self):
        """Shared term gets a lower idf weight than a unique one."""
        docs = ["le chat noir", "le chat blanc", "la voiture rouge"]
        matrix, vocab = fit_transform(docs, UNIGRAMS)

        assert 'chat' in vocab
        assert vocab == sorted(vocab)
        assert matrix.shape == (3, len(vocab))

        # Same tf in document 0, so weights compare like idf
        chat = vocab.index('chat')
        noir = vocab.index('noir')
        assert matrix[0, chat] < matrix[0, noir]
        assert smoothed_idf(2, 3) < smoothed_idf(1, 3)

        assert np.allclose(np.linalg.norm(matrix, axis=1), 1.0, atol=1e-9)

    def test_rows_are_unit_or_zero(self):
        """Rows with no vocabulary term stay all zero."""
        docs = ["alpha beta", "alpha gamma", "delta"]
        options = {'min_df': 2, 'max_df': 1.0, 'ngram_min': 1, 'ngram_max': 1}
        matrix, vocab = fit_transform(docs, options)

        assert vocab == ['alpha']
        assert np.allclose(matrix[:2, 0], 1.0)
        assert np.all(matrix[2] == 0.0)

    def test_term_frequency_counts(self):
        """Raw counts multiply the idf before normalization."""
        docs = ["a a b", "b c"]
        matrix, vocab = fit_transform(docs, UNIGRAMS)

        idf = smoothed_idf(np.array([1, 2, 1]), 2)
        row = np.array([2, 1, 0]) * idf
        assert vocab == ['a', 'b', 'c']
        assert np.allclose(matrix[0], row / np.linalg.norm(row))

    def test_bigrams(self):
        """N-gram ranges add multi-word terms."""
        docs = ["new york city", "new york state"]
        options = {'min_df': 2, 'max_df': 1.0, 'ngram_min': 1, 'ngram_max': 2}
        _, vocab = fit_transform(docs, options)

        assert vocab == ['new', 'new york', 'york']

    def test_deterministic(self):
        """Identical inputs give identical output."""
        docs = ["b a c", "c d", "a a d e"]
        m1, v1 = fit_transform(docs, UNIGRAMS)
        m2, v2 = fit_transform(docs, UNIGRAMS)

        assert v1 == v2
        assert np.array_equal(m1, m2)

    def test_matches_sklearn(self):
        """Same weights as scikit-learn's smoothed, L2-normalized TF-IDF."""
        sklearn_text = pytest.importorskip("sklearn.feature_extraction.text")

        docs = [
            "The cat sat on the mat",
            "the dog sat on the log",
            "cats and dogs",
            "the mat and the log",
        ]
        options = VectorizerOptions(min_df=1, max_df=0.75, ngram_min=1, ngram_max=2)
        matrix, vocab = fit_transform(docs, options)

        reference = sklearn_text.TfidfVectorizer(
            lowercase=True, tokenizer=str.split, token_pattern=None,
            ngram_range=(1, 2), min_df=1, max_df=0.75,
            smooth_idf=True, sublinear_tf=False, norm='l2'
        )
        expected = reference.fit_transform(docs).toarray()

        assert vocab == list(reference.get_feature_names_out())
        assert np.allclose(matrix, expected)

    def test_invalid_options(self):
        """Options are validated before any work."""
        with pytest.raises(ValueError):
            fit_transform(["a"], {'min_df': 0, 'max_df': 1.0, 'ngram_min': 1, 'ngram_max': 1})
        with pytest.raises(ValueError):
            fit_transform(["a"], {'min_df': 1, 'max_df': 1.5, 'ngram_min': 1, 'ngram_max': 1})
        with pytest.raises(ValueError):
            fit_transform(["a"], {'min_df': 1, 'max_df': 1.0, 'ngram_min': 2, 'ngram_max': 1})

    def test_no_documents(self):
        """An empty corpus has no vocabulary."""
        with pytest.raises(EmptyVocabularyError):
            fit_transform([], UNIGRAMS)


class TestNamedOutput:
    """Tests for tfidf_named_matrix."""

    def test_names(self):
        """Rows carry document ids and columns carry terms."""
        nmat = tfidf_named_matrix(["x y", "y z"], UNIGRAMS, rownames=[10, 20])

        assert nmat.rownames() == [10, 20]
        assert nmat.colnames() == ['x', 'y', 'z']
        assert nmat.get_row_by_name(20)[0] == 0.0


def test_l2_normalize_rows():
    """Zero rows are left alone."""
    m = np.array([[3.0, 4.0], [0.0, 0.0]])
    result = l2_normalize_rows(m)

    assert np.allclose(result[0], [0.6, 0.8])
    assert np.all(result[1] == 0.0)
