"""Query-string helpers shared by the cache key and the wire format.

Parameters are flattened with bracketed notation (``field[]=a&field[]=b``,
``filter[component]=page``). The same serializer produces the request
signature and the transmitted query string, so the two never diverge.
"""

from typing import Any, Dict, List, Mapping, Optional, Tuple
from urllib.parse import urlencode

from sbclient.domain.models.common import RequestSignature

SPACES_ME_PATH = "/cdn/spaces/me"  # Always reflects live state, never cached
CDN_PATH_MARKER = "/cdn/"


def _scalar(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _flatten(prefix: str, value: Any, pairs: List[Tuple[str, str]]) -> None:
    if value is None:
        return
    if isinstance(value, Mapping):
        # Sorted so parameter insertion order never changes the output
        for key in sorted(value, key=str):
            _flatten(f"{prefix}[{key}]", value[key], pairs)
    elif isinstance(value, (list, tuple)):
        # Element order is significant and kept as given
        for item in value:
            _flatten(f"{prefix}[]", item, pairs)
    else:
        pairs.append((prefix, _scalar(value)))


def serialize_params(params: Optional[Mapping[str, Any]]) -> List[Tuple[str, str]]:
    """Flattens a parameter mapping into bracketed key/value pairs.

    Args:
        params: Query parameters. Nested mappings and sequences are allowed.

    Returns:
        Ordered (key, value) pairs. None values are omitted.
    """
    pairs: List[Tuple[str, str]] = []
    for key in sorted(params or {}, key=str):
        _flatten(str(key), params[key], pairs)
    return pairs


def encode_params(params: Optional[Mapping[str, Any]]) -> str:
    """Returns the URL-encoded bracketed query string for params."""
    return urlencode(serialize_params(params))


def build_signature(url: str, params: Optional[Mapping[str, Any]]) -> RequestSignature:
    """Builds the deterministic cache key for a read request."""
    return RequestSignature(encode_params({"url": url, "params": dict(params or {})}))


def get_options_page(params: Optional[Mapping[str, Any]], per_page: int = 25, page: int = 1) -> Dict[str, Any]:
    """Returns a copy of params with paging applied."""
    options = dict(params or {})
    options["per_page"] = per_page
    options["page"] = page
    return options


def is_cdn_url(url: str) -> bool:
    """True for paths on the read-only content-delivery surface."""
    return CDN_PATH_MARKER in url
