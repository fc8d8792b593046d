"""The request orchestrator: StoryblokClient.

Every read goes through ``cache_response``:

    parameter defaulting -> auto-clear check -> cache lookup
      -> throttled dispatch (retried on 429 with linear backoff)
      -> relation resolution -> cache write -> cache version update

Writes (post/put/delete) only pass through the throttled queue.
"""

import logging
import math
from typing import Any, Dict, List, Optional

from sbclient.core.relation_resolver import RelationResolver, parse_relation_fields
from sbclient.domain.errors import ConfigurationError, TransportError
from sbclient.domain.events.api_events import CacheFlushed, CacheVersionUpdated, dispatch_event
from sbclient.domain.interfaces.cache import CacheProvider
from sbclient.domain.interfaces.component_resolver import ComponentResolver
from sbclient.domain.interfaces.http_transport import HttpTransport
from sbclient.domain.models.common import (
    AccessToken,
    ApiResponse,
    CacheVersion,
    RequestPath,
    StoryUuid,
    TransportResponse,
    VERSION_DRAFT,
    VERSION_PUBLISHED,
)
from sbclient.domain.models.config import CLEAR_AUTO, ClientConfig
from sbclient.infrastructure.cache.cache_versions import SHARED_CACHE_VERSIONS, CacheVersionTracker
from sbclient.infrastructure.cache.memory_cache import MemoryStore, create_cache_provider
from sbclient.infrastructure.http.httpx_transport import HttpxTransport
from sbclient.infrastructure.resilience.api_retry import ApiRetryService
from sbclient.infrastructure.resilience.rate_limiter import (
    DEFAULT_MAX_REQUESTS,
    DEFAULT_TIME_WINDOW_SECONDS,
    MANAGEMENT_MAX_REQUESTS,
    RateLimiter,
    ThrottledQueue,
)
from sbclient.utils.query import SPACES_ME_PATH, build_signature, get_options_page, is_cdn_url

logger = logging.getLogger(__name__)

DEFAULT_PER_PAGE = 25


class StoryblokClient:
    """Async client for the Storyblok content delivery and management APIs."""

    def __init__(
        self,
        config: ClientConfig,
        transport: Optional[HttpTransport] = None,
        cache_versions: Optional[CacheVersionTracker] = None,
        memory_store: Optional[MemoryStore] = None,
        retry_service: Optional[ApiRetryService] = None,
    ):
        """Initializes the client.

        Args:
            config: Client options.
            transport: HTTP transport; an HttpxTransport is built when omitted.
            cache_versions: Version tracker; the process-wide one when omitted.
            memory_store: Store for the 'memory' cache; process-wide when omitted.
            retry_service: Retry policy; built from config.max_retries when omitted.
        """
        self.config = config
        headers = dict(config.headers or {})
        rate_limit = DEFAULT_MAX_REQUESTS

        if config.oauth_token is not None:
            headers["Authorization"] = config.oauth_token
            rate_limit = MANAGEMENT_MAX_REQUESTS

        if config.rate_limit is not None:
            rate_limit = config.rate_limit

        self.transport = transport or HttpxTransport(
            base_url=config.base_url(),
            headers=headers,
            timeout=config.timeout,
            proxy=config.proxy,
        )
        self.rate_limiter = RateLimiter(max_requests=rate_limit, time_window=DEFAULT_TIME_WINDOW_SECONDS)
        self.throttle = ThrottledQueue(self.transport, self.rate_limiter)
        self.retry_service = retry_service or ApiRetryService(max_retries=config.max_retries)
        self.max_retries = self.retry_service.max_retries

        self.access_token = config.access_token
        self.cache_config = config.cache
        self.cache_provider: CacheProvider = create_cache_provider(config.cache, store=memory_store)
        self._cache_versions = cache_versions if cache_versions is not None else SHARED_CACHE_VERSIONS

        self.relations: Dict[StoryUuid, Any] = {}
        self.relation_resolver = RelationResolver(self.get_stories, self.relations)

        self.component_resolver: Optional[ComponentResolver] = None
        if config.component_resolver is not None:
            self.set_component_resolver(config.component_resolver)

        logger.info(f"StoryblokClient initialized: {config.as_dict()}")

    async def __aenter__(self) -> "StoryblokClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Closes the underlying transport."""
        await self.transport.aclose()

    def set_component_resolver(self, resolver: ComponentResolver) -> None:
        """Registers the hook used to render embedded components in rich text."""
        if not callable(resolver):
            raise ConfigurationError("component_resolver must be callable")
        self.component_resolver = resolver

    # --- Parameter defaulting ---

    def parse_params(self, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Applies delivery API defaults (version, token, cv) to a copy of params."""
        params = dict(params or {})
        if not params.get("version"):
            params["version"] = VERSION_PUBLISHED

        if not params.get("token"):
            params["token"] = self.get_token()

        if not params.get("cv"):
            cv = self._cache_versions.get(params["token"])
            if cv is not None:
                params["cv"] = cv

        return params

    def factory_param_options(self, url: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Applies defaults for delivery API paths; other paths pass through."""
        if is_cdn_url(url):
            return self.parse_params(params)
        return dict(params or {})

    # --- Reads ---

    async def make_request(self, url: RequestPath, params: Optional[Dict[str, Any]], per_page: int, page: int) -> ApiResponse:
        """Fetches one page of a collection."""
        options = self.factory_param_options(url, get_options_page(params, per_page, page))
        return await self.cache_response(url, options)

    async def get(self, slug: str, params: Optional[Dict[str, Any]] = None) -> ApiResponse:
        """Issues a cacheable GET for '/{slug}'."""
        url = RequestPath(f"/{slug}")
        query = self.factory_param_options(url, params)
        return await self.cache_response(url, query)

    async def get_all(self, slug: str, params: Optional[Dict[str, Any]] = None, entity: Optional[str] = None) -> List[Any]:
        """Fetches every page of a collection sequentially.

        Args:
            slug: Collection path, e.g. 'cdn/stories'.
            params: Query parameters; 'per_page' sets the page size (default 25).
            entity: Response field holding the items; defaults to the last path segment.

        Returns:
            All items, in page order.
        """
        params = dict(params or {})
        per_page = int(params.get("per_page") or DEFAULT_PER_PAGE)
        url = RequestPath(f"/{slug}")
        entity = entity or url.rstrip("/").split("/")[-1]

        page = 1
        res = await self.make_request(url, params, per_page, page)
        items = self._entity_items(res, entity)
        last_page = math.ceil(res.total / per_page) if res.total else 1

        while page < last_page:
            page += 1
            res = await self.make_request(url, params, per_page, page)
            items.extend(self._entity_items(res, entity))

        logger.debug(f"Fetched {len(items)} item(s) of '{entity}' across {page} page(s).")
        return items

    @staticmethod
    def _entity_items(res: ApiResponse, entity: str) -> List[Any]:
        values = (res.data or {}).get(entity) or []
        if isinstance(values, dict):
            return list(values.values())
        return list(values)

    async def get_stories(self, params: Optional[Dict[str, Any]] = None) -> ApiResponse:
        return await self.get("cdn/stories", params)

    async def get_story(self, slug: str, params: Optional[Dict[str, Any]] = None) -> ApiResponse:
        return await self.get(f"cdn/stories/{slug}", params)

    # --- Writes ---

    async def post(self, slug: str, params: Optional[Dict[str, Any]] = None) -> TransportResponse:
        return await self.throttle.submit("post", RequestPath(f"/{slug}"), json=params)

    async def put(self, slug: str, params: Optional[Dict[str, Any]] = None) -> TransportResponse:
        return await self.throttle.submit("put", RequestPath(f"/{slug}"), json=params)

    async def delete(self, slug: str, params: Optional[Dict[str, Any]] = None) -> TransportResponse:
        return await self.throttle.submit("delete", RequestPath(f"/{slug}"), params=params)

    # --- Tokens and cache versions ---

    def set_token(self, token: AccessToken) -> None:
        self.access_token = token

    def get_token(self) -> Optional[AccessToken]:
        return self.access_token

    def cache_versions(self) -> Dict[AccessToken, CacheVersion]:
        """Returns every known cache version, keyed by token."""
        return self._cache_versions.all()

    def cache_version(self) -> Optional[CacheVersion]:
        return self._cache_versions.get(self.access_token)

    def set_cache_version(self, cv: CacheVersion) -> None:
        if self.access_token:
            self._cache_versions.set(self.access_token, cv)

    async def flush_cache(self, reason: str = "manual") -> "StoryblokClient":
        """Drops every cached response."""
        await self.cache_provider.flush()
        dispatch_event(CacheFlushed(reason=reason))
        return self

    # --- The cacheable request path ---

    @staticmethod
    def _is_cacheable(url: str, params: Dict[str, Any]) -> bool:
        return params.get("version") == VERSION_PUBLISHED and url != SPACES_ME_PATH

    async def cache_response(self, url: RequestPath, params: Dict[str, Any]) -> ApiResponse:
        """Serves a read from cache or the network.

        Args:
            url: Target path.
            params: Fully defaulted query parameters.

        Returns:
            The (relation-resolved) ApiResponse.

        Raises:
            ConfigurationError: For malformed resolve_relations, before any request.
            MaxRetryError: When rate limiting outlasts the retry budget.
            TransportError: For any other failed exchange.
        """
        relation_fields = parse_relation_fields(params.get("resolve_relations"))
        if relation_fields and not isinstance(params["resolve_relations"], str):
            params = dict(params, resolve_relations=",".join(relation_fields))

        signature = build_signature(url, params)
        provider = self.cache_provider

        if self.cache_config.clear == CLEAR_AUTO and params.get("version") == VERSION_DRAFT:
            await self.flush_cache(reason="auto_draft")

        cacheable = self._is_cacheable(url, params)
        if cacheable:
            cached = await provider.get(signature)
            if cached is not None:
                return cached

        res = await self.retry_service.execute_with_retry(
            self.throttle.submit, "get", url, params=params, endpoint_name=url
        )

        if res.status != 200:
            raise TransportError(
                f"Unexpected status code {res.status} for {url}",
                status_code=res.status,
                body=res.body,
                headers=res.headers,
            )

        response = ApiResponse.from_transport(res)

        if relation_fields:
            await self.relation_resolver.resolve(response.data, params)

        if cacheable:
            await provider.set(signature, response)

        await self._update_cache_version(params, response, res)
        return response

    async def _update_cache_version(self, params: Dict[str, Any], response: ApiResponse, res: TransportResponse) -> None:
        data = response.data if isinstance(response.data, dict) else {}
        cv = data.get("cv")
        is_draft = params.get("version") == VERSION_DRAFT
        if not cv or not (is_draft or res.redirected_once):
            return

        token = params.get("token")
        previous = self._cache_versions.get(token)
        self._cache_versions.set(token, cv)
        if previous != cv:
            dispatch_event(CacheVersionUpdated(previous=previous, current=cv))

        if is_draft and previous is not None and previous != cv:
            logger.info(f"Cache version moved from {previous} to {cv}; flushing stale cache.")
            await self.flush_cache(reason="stale_version")
