# brew_vulns/formula_loader.py

import os
import logging
from typing import Any, Dict, Iterable, List, Optional

from .brew_client import BrewClient
from .exceptions import ExternalCommandError, ManifestNotFoundError
from .formula import Formula, VulnerabilityQuery

logger = logging.getLogger("brew-vulns")


def dedupe_by_name(formulae: Iterable[Formula]) -> List[Formula]:
    """Drop formulae whose name was already seen, keeping first-seen order."""
    unique: Dict[str, Formula] = {}
    for formula in formulae:
        unique.setdefault(formula.name, formula)
    return list(unique.values())


def matches_filter(formula: Formula, formula_filter: str) -> bool:
    """True for an exact name match or a versioned name such as python@3.11 for python."""
    return formula.name == formula_filter or formula.name.split("@", 1)[0] == formula_filter


class FormulaLoader:
    """
    Assembles the set of formulae to check.

    Three strategies are available: everything installed, one installed
    formula plus its installed dependencies, or the formulae declared in a
    Brewfile (optionally with their dependencies). Each call fetches fresh
    data through the BrewClient.
    """

    def __init__(self, client: Optional[BrewClient] = None):
        self.client = client or BrewClient()

    @staticmethod
    def _build(payload: Dict[str, Any]) -> List[Formula]:
        return [Formula.from_dict(entry) for entry in payload["formulae"]]

    def _installed(self) -> List[Formula]:
        formulae = self._build(self.client.fetch_installed_metadata())
        logger.debug(f"Found {len(formulae)} installed formulae")
        return formulae

    def load_installed(self, formula_filter: Optional[str] = None) -> List[Formula]:
        """
        Load installed formulae, optionally narrowed to one formula name.

        Args:
            formula_filter: Formula name; versioned variants (name@x) also match

        Returns:
            List[Formula]: Matching formulae, empty if nothing matches
        """
        formulae = self._installed()
        if formula_filter:
            formulae = [f for f in formulae if matches_filter(f, formula_filter)]
            logger.debug(f"{len(formulae)} installed formulae match '{formula_filter}'")
        return dedupe_by_name(formulae)

    def load_with_dependencies(self, formula_filter: Optional[str] = None) -> List[Formula]:
        """
        Load one installed formula and its installed dependencies.

        Without a filter this is the same as load_installed(). Dependencies
        come from a single `brew deps --installed` call; brew computes the
        transitive closure.
        """
        all_formulae = self._installed()
        if not formula_filter:
            return dedupe_by_name(all_formulae)

        filtered = [f for f in all_formulae if matches_filter(f, formula_filter)]
        if not filtered:
            logger.debug(f"No installed formula matches '{formula_filter}', skipping dependency lookup")
            return []

        installed_by_name: Dict[str, Formula] = {}
        for formula in all_formulae:
            installed_by_name.setdefault(formula.name, formula)

        dep_names = self.client.fetch_dependency_names(formula_filter, installed_only=True)
        logger.debug(f"'{formula_filter}' has {len(dep_names)} installed dependencies")

        dependencies = []
        for dep_name in dep_names:
            dep = installed_by_name.get(dep_name)
            if dep is None:
                logger.debug(f"Dependency '{dep_name}' not found among installed formulae")
                continue
            dependencies.append(dep)

        return dedupe_by_name(filtered + dependencies)

    def load_from_manifest(self, manifest_path: str, include_dependencies: bool = False) -> List[Formula]:
        """
        Load the formulae declared in a Brewfile.

        Args:
            manifest_path: Path to the Brewfile
            include_dependencies: Also load every dependency of the declared formulae

        Returns:
            List[Formula]: Brewfile formulae first, then dependencies

        Raises:
            ManifestNotFoundError: If the Brewfile does not exist
            ExternalCommandError: If listing the Brewfile or fetching its formulae fails
        """
        if not os.path.exists(manifest_path):
            raise ManifestNotFoundError(f"Brewfile not found: {manifest_path}", details={"path": manifest_path})

        names = self.client.fetch_manifest_package_names(manifest_path)
        if not names:
            logger.debug(f"No formulae declared in {manifest_path}")
            return []

        formulae = self._build(self.client.fetch_metadata_for(names))

        if include_dependencies:
            formulae.extend(self._manifest_dependencies(names))

        return dedupe_by_name(formulae)

    def _manifest_dependencies(self, names: List[str]) -> List[Formula]:
        # A failing brew call here drops dependencies only, never Brewfile formulae.
        dep_names: Dict[str, None] = {}
        for name in names:
            try:
                listed = self.client.fetch_dependency_names(name)
            except ExternalCommandError as e:
                logger.warning(f"Could not list dependencies of '{name}': {e.message}")
                continue
            for dep_name in listed:
                dep_names.setdefault(dep_name, None)

        remaining = [dep for dep in dep_names if dep not in names]
        if not remaining:
            return []

        logger.debug(f"Fetching metadata for {len(remaining)} Brewfile dependencies")
        try:
            payload = self.client.fetch_metadata_for(remaining)
        except ExternalCommandError as e:
            logger.warning(f"Could not load Brewfile dependencies, continuing without them: {e.message}")
            return []
        return self._build(payload)

    @staticmethod
    def to_vulnerability_queries(formulae: Iterable[Formula]) -> List[VulnerabilityQuery]:
        """
        Build vulnerability queries for every formula that resolves to a repository and tag.
        """
        queries = []
        skipped = []
        for formula in formulae:
            query = formula.to_vulnerability_query()
            if query is None:
                skipped.append(formula.name)
            else:
                queries.append(query)

        if skipped:
            logger.debug(f"Skipping {len(skipped)} formulae without a resolvable repository and tag: {', '.join(skipped)}")
        return queries


def load_installed(formula_filter: Optional[str] = None) -> List[Formula]:
    return FormulaLoader().load_installed(formula_filter)


def load_with_dependencies(formula_filter: Optional[str] = None) -> List[Formula]:
    return FormulaLoader().load_with_dependencies(formula_filter)


def load_from_manifest(manifest_path: str, include_dependencies: bool = False) -> List[Formula]:
    return FormulaLoader().load_from_manifest(manifest_path, include_dependencies=include_dependencies)
