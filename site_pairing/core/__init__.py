"""Core utilities and shared infrastructure.

- config: Configuration loading and validation
- constants: API paths, media types, URN prefix, defaults
- exceptions: Custom exception hierarchy
"""
