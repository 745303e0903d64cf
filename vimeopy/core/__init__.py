"""Core building blocks: API client, uploads, errors and logging."""
