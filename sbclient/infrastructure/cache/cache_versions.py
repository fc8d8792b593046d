"""Process-wide tracker of the last cache version seen per access token.

The version is only sent upstream as the 'cv' query parameter to bypass
CDN caching; it never decides whether a local cache entry is valid.
"""

import logging
from typing import Dict, Optional

from sbclient.domain.models.common import AccessToken, CacheVersion

logger = logging.getLogger(__name__)


class CacheVersionTracker:
    """Maps access tokens to their last observed cache version."""

    def __init__(self):
        self._versions: Dict[AccessToken, CacheVersion] = {}

    def get(self, token: Optional[AccessToken]) -> Optional[CacheVersion]:
        if token is None:
            return None
        return self._versions.get(token)

    def set(self, token: Optional[AccessToken], version: CacheVersion) -> None:
        if token is None:
            logger.debug("No access token; cache version not recorded.")
            return
        self._versions[token] = version

    def all(self) -> Dict[AccessToken, CacheVersion]:
        return dict(self._versions)

    def clear(self) -> None:
        self._versions = {}


SHARED_CACHE_VERSIONS = CacheVersionTracker()
