import pytest

from brew_vulns.brew_client import BrewClient
from brew_vulns.formula_loader import FormulaLoader


def formula_entry(name, version="1.0.0", stable_url=None, head_url=None, dependencies=None, full_name=None):
    """Builds one entry of the `formulae` list as emitted by `brew info --json=v2`."""
    entry = {
        "name": name,
        "full_name": full_name or name,
        "versions": {"stable": version},
        "urls": {},
        "dependencies": dependencies or [],
    }
    if stable_url:
        entry["urls"]["stable"] = {"url": stable_url}
    if head_url:
        entry["urls"]["head"] = {"url": head_url}
    return entry


@pytest.fixture
def mock_client(mocker):
    """A BrewClient double so no real brew process is started."""
    client = mocker.MagicMock(spec=BrewClient)
    client.fetch_installed_metadata.return_value = {"formulae": []}
    client.fetch_metadata_for.return_value = {"formulae": []}
    client.fetch_dependency_names.return_value = []
    client.fetch_manifest_package_names.return_value = []
    return client


@pytest.fixture
def loader(mock_client):
    return FormulaLoader(client=mock_client)


@pytest.fixture
def make_entry():
    return formula_entry


@pytest.fixture
def installed_payload():
    return {
        "formulae": [
            formula_entry("openssl@3", "3.2.0",
                          stable_url="https://github.com/openssl/openssl/releases/download/openssl-3.2.0/openssl-3.2.0.tar.gz"),
            formula_entry("python@3.11", "3.11.7",
                          stable_url="https://www.python.org/ftp/python/3.11.7/Python-3.11.7.tgz",
                          dependencies=["openssl@3", "xz"]),
            formula_entry("python", "3.12.1",
                          stable_url="https://www.python.org/ftp/python/3.12.1/Python-3.12.1.tgz"),
            formula_entry("xz", "5.4.5",
                          stable_url="https://github.com/tukaani-project/xz/releases/download/v5.4.5/xz-5.4.5.tar.gz"),
            formula_entry("jq", "1.7.1",
                          stable_url="https://github.com/jqlang/jq/releases/download/jq-1.7.1/jq-1.7.1.tar.gz"),
        ]
    }
