"""Historical price analysis with similar-product retrieval."""

__version__ = "0.1.0"
