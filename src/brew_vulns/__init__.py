# brew_vulns/__init__.py
"""
brew-vulns formula resolution package.

Loads Homebrew formulae and resolves each one to a source repository and
release tag that can be checked against a vulnerability database.
"""

from .brew_client import BrewClient
from .formula import Formula, VulnerabilityQuery
from .formula_loader import (
    FormulaLoader,
    load_installed,
    load_with_dependencies,
    load_from_manifest,
)

__all__ = [
    'BrewClient',
    'Formula',
    'VulnerabilityQuery',
    'FormulaLoader',
    'load_installed',
    'load_with_dependencies',
    'load_from_manifest',
]
