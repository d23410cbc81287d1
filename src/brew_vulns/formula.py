# brew_vulns/formula.py

from dataclasses import dataclass, field
from functools import cached_property
from typing import Any, Dict, Optional, Tuple

from packageurl import PackageURL

from .exceptions import MalformedDataError
from .utilities.source_urls import (
    GITHUB,
    GITLAB,
    CODEBERG,
    detect_forge,
    extract_repo_url,
    extract_tag,
)


def _dig(data: Dict[str, Any], *keys: str) -> Any:
    """Walk nested dictionaries, returning None as soon as a key is missing."""
    current: Any = data
    for key in keys:
        if not isinstance(current, dict):
            return None
        current = current.get(key)
    return current


def _optional_str(value: Any) -> Optional[str]:
    return str(value) if value is not None else None


@dataclass(frozen=True)
class VulnerabilityQuery:
    """A repository/tag pair that can be sent to the vulnerability database."""
    repository_url: str
    version: str
    name: str

    def to_dict(self) -> Dict[str, str]:
        return {
            "repository_url": self.repository_url,
            "version": self.version,
            "name": self.name,
        }


@dataclass(frozen=True)
class Formula:
    """
    A Homebrew formula normalized from `brew info --json=v2` output.

    The repository URL and release tag are derived from the download URLs
    the first time they are read and cached on the instance afterwards,
    including when they resolve to None.
    """
    name: str
    version: Optional[str] = None
    source_url: Optional[str] = None
    head_url: Optional[str] = None
    dependencies: Tuple[Any, ...] = field(default_factory=tuple)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Formula":
        """
        Build a Formula from one entry of the `formulae` list.

        Args:
            data: Raw formula metadata

        Returns:
            Formula: The normalized record

        Raises:
            MalformedDataError: If the entry is not a mapping or has no name
        """
        if not isinstance(data, dict):
            raise MalformedDataError(
                f"Expected formula metadata to be an object, got {type(data).__name__}",
                details={"entry": data},
            )

        name = data.get("name") or data.get("full_name")
        if not name:
            raise MalformedDataError("Formula metadata has neither 'name' nor 'full_name'", details={"entry": data})

        return cls(
            name=str(name),
            version=_optional_str(_dig(data, "versions", "stable") or data.get("version")),
            source_url=_optional_str(_dig(data, "urls", "stable", "url")),
            head_url=_optional_str(_dig(data, "urls", "head", "url")),
            dependencies=tuple(data.get("dependencies") or ()),
        )

    @cached_property
    def repo_url(self) -> Optional[str]:
        """Canonical repository URL, preferring the stable source URL over head."""
        return extract_repo_url(self.source_url) or extract_repo_url(self.head_url)

    @cached_property
    def tag(self) -> Optional[str]:
        """Release tag from the stable source URL. Head builds never have one."""
        return extract_tag(self.source_url)

    @property
    def forge(self) -> Optional[str]:
        return detect_forge(self.repo_url)

    @property
    def is_github(self) -> bool:
        return self.forge == GITHUB

    @property
    def is_gitlab(self) -> bool:
        return self.forge == GITLAB

    @property
    def is_codeberg(self) -> bool:
        return self.forge == CODEBERG

    @property
    def supported_forge(self) -> bool:
        return self.is_github or self.is_gitlab or self.is_codeberg

    def to_vulnerability_query(self) -> Optional[VulnerabilityQuery]:
        """
        Build the vulnerability database query for this formula.

        Returns:
            Optional[VulnerabilityQuery]: None when either the repository URL
            or the tag could not be resolved
        """
        if not (self.repo_url and self.tag):
            return None
        return VulnerabilityQuery(repository_url=self.repo_url, version=self.tag, name=self.name)

    def to_purl(self) -> Optional[str]:
        """
        Render the resolved repository and tag as a Package URL.

        GitHub has its own purl type. GitLab and Codeberg repositories are
        expressed as generic packages carrying a vcs_url qualifier.
        """
        query = self.to_vulnerability_query()
        if query is None:
            return None

        repo_path = query.repository_url.split(f"{self.forge}/", 1)[1]
        namespace, _, repo_name = repo_path.rpartition("/")

        if self.is_github:
            purl = PackageURL(type="github", namespace=namespace, name=repo_name, version=query.version)
        else:
            purl = PackageURL(
                type="generic",
                name=repo_name,
                version=query.version,
                qualifiers={"vcs_url": query.repository_url},
            )
        return purl.to_string()
