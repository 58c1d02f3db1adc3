"""
npm credentials lookup
Reads the registry auth token from the user's ~/.npmrc
"""
import os
from pathlib import Path
from typing import Optional, Union
from urllib.parse import urlparse

from loguru import logger

from errors import CredentialsNotFound

DEFAULT_REGISTRY = "https://registry.npmjs.org"


def npmrc_path() -> Path:
    """Location of the npmrc file, derived from HOME"""
    home = os.environ.get('HOME')
    return Path(home if home else Path.home()) / '.npmrc'


def auth_prefix(registry_url: str = DEFAULT_REGISTRY) -> str:
    """npmrc key prefix for a registry, e.g. //registry.npmjs.org/:_authToken="""
    parsed = urlparse(registry_url)
    if not parsed.netloc:
        return f"//{registry_url.strip('/')}/:_authToken="
    location = parsed.netloc + parsed.path.rstrip('/')
    return f"//{location}/:_authToken="


def get_npm_token(path: Optional[Union[str, Path]] = None,
                  registry_url: str = DEFAULT_REGISTRY) -> str:
    """
    Find the bearer token for the registry in an npmrc file.

    Args:
        path: npmrc file to read, defaults to <HOME>/.npmrc
        registry_url: Registry whose token line should be located

    Returns:
        The token string

    Raises:
        CredentialsNotFound: if the file can't be read or has no token line
    """
    path = Path(path) if path else npmrc_path()
    try:
        content = path.read_text(encoding='utf-8')
    except (OSError, UnicodeDecodeError) as e:
        raise CredentialsNotFound(f"Could not read {path}: {e}") from e

    prefix = auth_prefix(registry_url)
    for line in content.split('\n'):
        if line.startswith(prefix):
            token = line[len(prefix):].rstrip()
            if token:
                logger.debug("Found auth token for {} in {}", registry_url, path)
                return token

    raise CredentialsNotFound(f"auth token not found in {path}")
