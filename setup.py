"""
Setup script for textmap package.
"""

from setuptools import setup, find_packages

setup(
    name="textmap",
    version="0.1.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        # Core numerical dependencies
        "numpy>=1.20.0",
        "pandas>=1.5.0",

        # Option validation
        "pydantic>=2.0.0",

        # Utilities
        "pyyaml>=6.0.0",
    ],
    extras_require={
        "test": [
            "pytest>=6.0.0",
            # Reference implementations for cross-checks
            "scipy>=1.7.0",
            "scikit-learn>=1.2.0",
        ],
    },
    entry_points={
        'console_scripts': [
            'textmap=textmap.__main__:main',
        ],
    },
    description="TF-IDF, Jacobi PCA and K-means mapping of document collections",
    keywords="tfidf, pca, kmeans, clustering, text analysis",
    python_requires=">=3.8",
)
