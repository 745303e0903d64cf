"""Upload strategies module."""
from .streaming import ResumableStreamingStrategy
from .tus import TusUploadStrategy

__all__ = [
    'ResumableStreamingStrategy',
    'TusUploadStrategy',
]
