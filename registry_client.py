"""
npm Registry Client
Lists the packages of an organization and resolves the unpacked size
of each package's latest version
"""

import requests
from requests.adapters import HTTPAdapter
from loguru import logger
from typing import Any, Dict, Optional, Set
from urllib.parse import quote

from errors import OrgEmpty, OrgFetchFailed
from npm_token import DEFAULT_REGISTRY
from package_info import PackageInfo

DEFAULT_TIMEOUT = 30.0
DEFAULT_POOL_SIZE = 16


class MetadataError(Exception):
    """Raised when a package document lacks the fields needed to size it"""
    pass


def extract_unpacked_size(meta: Any) -> int:
    """
    Read versions[dist-tags.latest].dist.unpackedSize from a package document.

    Raises:
        MetadataError: naming the first missing or invalid field
    """
    if not isinstance(meta, dict):
        raise MetadataError("package document is not a JSON object")

    dist_tags = meta.get('dist-tags')
    latest = dist_tags.get('latest') if isinstance(dist_tags, dict) else None
    if not latest or not isinstance(latest, str):
        raise MetadataError("no latest dist-tag")

    versions = meta.get('versions')
    version = versions.get(latest) if isinstance(versions, dict) else None
    if not isinstance(version, dict):
        raise MetadataError(f"latest version {latest} not found")

    dist = version.get('dist')
    size = dist.get('unpackedSize') if isinstance(dist, dict) else None
    # bool is an int subclass
    if isinstance(size, bool) or not isinstance(size, int) or size < 0:
        raise MetadataError(f"version {latest} has no unpackedSize")
    return size


class RegistryClient:
    """Authenticated client for the two registry endpoints the report needs"""

    def __init__(self, token: str, registry_url: str = DEFAULT_REGISTRY,
                 timeout: float = DEFAULT_TIMEOUT, pool_size: int = DEFAULT_POOL_SIZE):
        self.registry_url = registry_url.rstrip('/')
        self.timeout = timeout
        self.session = requests.Session()
        self.session.headers.update({
            'Authorization': f'Bearer {token}',
            'Accept': 'application/json',
            'User-Agent': 'npm-org-sizes',
        })
        # One pooled connection per worker thread
        adapter = HTTPAdapter(pool_connections=pool_size, pool_maxsize=pool_size)
        self.session.mount('https://', adapter)
        self.session.mount('http://', adapter)

    def org_url(self, org: str) -> str:
        return f"{self.registry_url}/-/org/{quote(org, safe='')}/package"

    def package_url(self, name: str) -> str:
        # @scope/name -> @scope%2Fname
        return f"{self.registry_url}/{quote(name, safe='@')}"

    def _get(self, url: str) -> requests.Response:
        logger.debug("GET {}", url)
        return self.session.get(url, timeout=self.timeout)

    def fetch_org_packages(self, org: str) -> Set[str]:
        """
        List the package names owned by an organization.

        Raises:
            OrgFetchFailed: on transport errors, non-2xx status or a malformed body
            OrgEmpty: if the organization has no packages
        """
        try:
            response = self._get(self.org_url(org))
        except requests.RequestException as e:
            raise OrgFetchFailed(f"failed to fetch packages for org {org}: {e}") from e

        if not 200 <= response.status_code < 300:
            raise OrgFetchFailed(
                f"failed to fetch packages for org {org} (status: {response.status_code})"
            )

        try:
            packages: Dict[str, Any] = response.json()
        except ValueError as e:
            raise OrgFetchFailed(f"failed to decode response for org {org}: {e}") from e

        if not isinstance(packages, dict):
            raise OrgFetchFailed(
                f"unexpected response for org {org}: expected an object, "
                f"got {type(packages).__name__}"
            )
        if not packages:
            raise OrgEmpty(f"No packages found for org {org}")

        logger.info("Org {} has {} packages", org, len(packages))
        return set(packages)

    def fetch_package_size(self, name: str) -> Optional[PackageInfo]:
        """
        Resolve the unpacked size of a package's latest version.

        Failures are logged and reported as None so one bad package
        never aborts the run.
        """
        try:
            response = self._get(self.package_url(name))
        except requests.RequestException as e:
            logger.warning("Failed to fetch {}: {}", name, e)
            return None

        if not 200 <= response.status_code < 300:
            logger.warning("Package {} not found (status: {})", name, response.status_code)
            return None

        try:
            meta = response.json()
        except ValueError as e:
            logger.warning("Failed to decode response for {}: {}", name, e)
            return None

        try:
            size = extract_unpacked_size(meta)
        except MetadataError as e:
            logger.warning("Skipping {}: {}", name, e)
            return None

        info = PackageInfo.from_size(name, size)
        logger.debug("{} -> {}", name, info.pretty_size)
        return info

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> 'RegistryClient':
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
