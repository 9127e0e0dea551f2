"""
Option models for the analysis stages.

Every stage takes its parameters explicitly; these models validate them
once, at the boundary, and are built from a Config by AnalysisOptions.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from textmap.components.config import Config


class VectorizerOptions(BaseModel):
    """TF-IDF vocabulary and n-gram options."""

    model_config = ConfigDict(frozen=True)

    min_df: int = Field(..., ge=1)
    max_df: float = Field(..., gt=0.0, le=1.0)
    ngram_min: int = Field(..., ge=1)
    ngram_max: int = Field(..., ge=1)

    @model_validator(mode='after')
    def check_ngram_range(self) -> 'VectorizerOptions':
        if self.ngram_min > self.ngram_max:
            raise ValueError(
                f"ngram_min ({self.ngram_min}) must not exceed ngram_max ({self.ngram_max})"
            )
        return self


class PCAOptions(BaseModel):
    """Component count and Jacobi solver limits."""

    model_config = ConfigDict(frozen=True)

    n_components: int = Field(..., ge=1)
    max_iters: int = Field(..., ge=1)
    tolerance: float = Field(..., gt=0.0)


class KMeansOptions(BaseModel):
    """Cluster count, iteration cap and initialization seed."""

    model_config = ConfigDict(frozen=True)

    k: int = Field(..., ge=1)
    max_iters: int = Field(..., ge=1)
    seed: Optional[int] = Field(...)


class SplitOptions(BaseModel):
    """Train fraction and shuffle seed for the train/test sampler."""

    model_config = ConfigDict(frozen=True)

    train_ratio: float = Field(..., gt=0.0, le=1.0)
    seed: Optional[int] = Field(...)


class AnalysisOptions(BaseModel):
    """All options for one analysis run."""

    model_config = ConfigDict(frozen=True)

    vectorizer: VectorizerOptions
    pca: PCAOptions
    kmeans: KMeansOptions
    split: SplitOptions

    @classmethod
    def from_config(cls, config: Config) -> 'AnalysisOptions':
        """
        Build options from a configuration.

        Args:
            config: Configuration holding the vectorizer, pca, kmeans
                and split sections

        Returns:
            Validated options
        """
        return cls(
            vectorizer=VectorizerOptions(
                min_df=config.get('vectorizer.min-df'),
                max_df=config.get('vectorizer.max-df'),
                ngram_min=config.get('vectorizer.ngram-min'),
                ngram_max=config.get('vectorizer.ngram-max'),
            ),
            pca=PCAOptions(
                n_components=config.get('pca.n-components'),
                max_iters=config.get('pca.max-iters'),
                tolerance=config.get('pca.tolerance'),
            ),
            kmeans=KMeansOptions(
                k=config.get('kmeans.k'),
                max_iters=config.get('kmeans.max-iters'),
                seed=config.get('kmeans.seed'),
            ),
            split=SplitOptions(
                train_ratio=config.get('split.train-ratio'),
                seed=config.get('split.seed'),
            ),
        )
