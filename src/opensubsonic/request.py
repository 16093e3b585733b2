"""Request composition: base URL, REST path, common and endpoint parameters."""

from typing import Iterable, Optional, Tuple

import httpx

from .auth import auth_params
from .models import ClientConfig, RequestDescriptor
from .params import ParameterSet, ParamValue

REST_PATH = "rest/"
RESPONSE_FORMAT = "json"


def rest_url(base_url: str, endpoint: str) -> str:
    """Build the absolute endpoint URL, keeping any sub-path of the base URL.

    Example:
        >>> rest_url("https://host.example.com/music", "ping")
        'https://host.example.com/music/rest/ping'
    """
    url = httpx.URL(base_url)
    path = url.path
    if not path.endswith("/"):
        path += "/"
    return str(url.copy_with(path=f"{path}{REST_PATH}{endpoint}"))


def common_params(config: ClientConfig) -> ParameterSet:
    """Parameters sent with every request.

    Credentials are computed here, so each call yields a fresh salt for token
    authentication.
    """
    params = ParameterSet().add("u", config.username)
    params.extend(auth_params(config.auth))
    params.add("v", config.api_version)
    params.add("c", config.client_name)
    params.add("f", RESPONSE_FORMAT)
    return params


def build_request(
    config: ClientConfig,
    endpoint: str,
    params: Optional[Iterable[Tuple[str, ParamValue]]] = None,
    method: str = "GET",
) -> RequestDescriptor:
    """Compose the request for an endpoint.

    Args:
        config: Client configuration
        endpoint: REST endpoint name (e.g. "getAlbumList2")
        params: Endpoint-specific parameters; absent values are dropped
        method: "GET", or "POST" for the endpoints that take a body

    Returns:
        RequestDescriptor with the absolute URL including the query string
    """
    query = common_params(config).extend(params or ()).encode()
    return RequestDescriptor(
        method=method,
        url=f"{rest_url(config.base_url, endpoint)}?{query}",
        endpoint=endpoint,
    )
