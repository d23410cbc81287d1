# brew_vulns/brew_client.py

import os
import json
import logging
import subprocess
from typing import Any, Dict, List, Optional, Sequence

from .exceptions import ExternalCommandError, MalformedDataError

logger = logging.getLogger("brew-vulns")

# Homebrew exports the path of the running brew here; fall back to PATH lookup.
BREW_EXECUTABLE_ENV = "HOMEBREW_BREW_FILE"
DEFAULT_BREW_EXECUTABLE = "brew"

# Conventional shell status for "command not found".
COMMAND_NOT_FOUND_STATUS = 127


class BrewClient:
    """
    Thin wrapper around the `brew` command line.

    Every call runs exactly one blocking subprocess and returns its raw
    output. Non-zero exit statuses are translated into ExternalCommandError.
    Nothing is retried.
    """

    def __init__(self, brew_path: Optional[str] = None):
        self.brew_path = brew_path or os.getenv(BREW_EXECUTABLE_ENV) or DEFAULT_BREW_EXECUTABLE

    def _run(self, *args: str) -> str:
        command = [self.brew_path, *args]
        logger.debug(f"Running: {' '.join(command)}")

        try:
            result = subprocess.run(command, capture_output=True, text=True)
        except FileNotFoundError:
            raise ExternalCommandError(
                f"'{self.brew_path}' not found. Please install Homebrew and ensure brew is in your PATH.",
                exit_status=COMMAND_NOT_FOUND_STATUS,
                details={"command": command},
            )

        if result.returncode != 0:
            raise ExternalCommandError(
                f"brew {args[0]} failed with status {result.returncode}",
                exit_status=result.returncode,
                details={"command": command, "stderr": (result.stderr or "").strip()},
            )

        return result.stdout

    @staticmethod
    def _parse_info_json(output: str) -> Dict[str, Any]:
        try:
            payload = json.loads(output)
        except json.JSONDecodeError as e:
            raise MalformedDataError(f"Could not parse brew info output as JSON: {e}")

        if not isinstance(payload, dict) or not isinstance(payload.get("formulae"), list):
            raise MalformedDataError("brew info output does not contain a 'formulae' list")

        return payload

    @staticmethod
    def _parse_lines(output: str) -> List[str]:
        return [line.strip() for line in output.splitlines() if line.strip()]

    def fetch_installed_metadata(self) -> Dict[str, Any]:
        """
        Fetch metadata for every installed formula.

        Returns:
            Dict[str, Any]: Parsed `brew info --json=v2` payload

        Raises:
            ExternalCommandError: If brew exits with a non-zero status
            MalformedDataError: If the output is not the expected JSON
        """
        output = self._run("info", "--json=v2", "--installed")
        return self._parse_info_json(output)

    def fetch_metadata_for(self, names: Sequence[str]) -> Dict[str, Any]:
        """
        Fetch metadata for the given formula names.

        Args:
            names: Formula names; must not be empty

        Raises:
            ValueError: If names is empty
            ExternalCommandError: If brew exits with a non-zero status
            MalformedDataError: If the output is not the expected JSON
        """
        if not names:
            raise ValueError("fetch_metadata_for() requires at least one formula name")
        output = self._run("info", "--json=v2", *names)
        return self._parse_info_json(output)

    def fetch_dependency_names(self, name: str, installed_only: bool = False) -> List[str]:
        """
        List the dependencies of a formula, as resolved by `brew deps`.

        Args:
            name: Formula name
            installed_only: Restrict the listing to installed dependencies

        Returns:
            List[str]: Dependency names in brew's output order
        """
        args = ["deps", "--installed", name] if installed_only else ["deps", name]
        return self._parse_lines(self._run(*args))

    def fetch_manifest_package_names(self, manifest_path: str) -> List[str]:
        """
        List the formulae declared in a Brewfile.

        Args:
            manifest_path: Path to the Brewfile

        Returns:
            List[str]: Formula names in Brewfile order
        """
        output = self._run("bundle", "list", f"--file={manifest_path}", "--formula")
        return self._parse_lines(output)
