"""Upload API error classification."""
from .api_errors import ErrorClassifier, classify

__all__ = [
    'ErrorClassifier',
    'classify',
]
