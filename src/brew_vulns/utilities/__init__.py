"""
Utilities package for brew-vulns.

This package contains the URL helpers used to resolve formula download
URLs to repositories and release tags.
"""

from .source_urls import (
    SUPPORTED_FORGES,
    detect_forge,
    extract_repo_url,
    extract_tag,
)

__all__ = [
    'SUPPORTED_FORGES',
    'detect_forge',
    'extract_repo_url',
    'extract_tag',
]
