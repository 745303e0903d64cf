"""Upload services module."""
from .file_service import FileValidator, AsyncFileReader, StreamWindow

__all__ = [
    'FileValidator',
    'AsyncFileReader',
    'StreamWindow',
]
