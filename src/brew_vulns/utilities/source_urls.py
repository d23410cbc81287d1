# brew_vulns/utilities/source_urls.py

"""
Helpers that turn formula download URLs into a canonical repository URL
and a release tag.

Only the three big public forges are recognized. Everything else resolves
to None so the formula is reported as not checkable.
"""

import re
import logging
from typing import Optional

logger = logging.getLogger("brew-vulns")

GITHUB = "github.com"
GITLAB = "gitlab.com"
CODEBERG = "codeberg.org"

# Priority order matters: the first host found in the URL wins.
SUPPORTED_FORGES = (GITHUB, GITLAB, CODEBERG)

GITLAB_SUBRESOURCE_MARKER = "/-/"

TAG_PATTERNS = [
    re.compile(r'/archive/refs/tags/([^/]+)\.tar\.gz$'),
    re.compile(r'/archive/refs/tags/([^/]+)\.zip$'),
    re.compile(r'/archive/([^/]+)\.tar\.gz$'),
    re.compile(r'/archive/([^/]+)\.zip$'),
    re.compile(r'/releases/download/([^/]+)/'),
    re.compile(r'/tarball/([^/]+)$'),
]


def detect_forge(url: Optional[str]) -> Optional[str]:
    """Return the first supported forge host contained in *url*, if any."""
    if not url:
        return None
    for forge in SUPPORTED_FORGES:
        if forge in url:
            return forge
    return None


def _normalize_repo_path(path: str) -> str:
    # GitLab nests sub-resources (archives, tags, ...) under "/-/", which also
    # lets project paths contain subgroups.
    if GITLAB_SUBRESOURCE_MARKER in path:
        path = path.split(GITLAB_SUBRESOURCE_MARKER, 1)[0]
    else:
        path = "/".join(path.split("/")[:2])
    path = path.rstrip("/")
    if path.endswith(".git"):
        path = path[:-len(".git")]
    return path


def extract_repo_url(url: Optional[str]) -> Optional[str]:
    """
    Derive the canonical repository URL from a source or download URL.

    Args:
        url: Any URL taken from formula metadata (stable or head)

    Returns:
        Optional[str]: "https://<forge>/<owner>/<repo>", or None when the URL
        is missing, not on a supported forge, or not shaped like a repo URL
    """
    forge = detect_forge(url)
    if not forge:
        return None

    match = re.search(rf'https?://{re.escape(forge)}/([^/]+/[^/]+.*)', url)
    if not match:
        logger.debug(f"URL mentions {forge} but is not a repository URL: {url}")
        return None

    repo_path = _normalize_repo_path(match.group(1))
    return f"https://{forge}/{repo_path}"


def extract_tag(url: Optional[str]) -> Optional[str]:
    """
    Extract the release tag from an archive or release download URL.

    Patterns are tried in a fixed order and the first match wins. The
    captured segment is returned as-is.
    """
    if not url:
        return None

    for pattern in TAG_PATTERNS:
        match = pattern.search(url)
        if match:
            return match.group(1)

    return None
