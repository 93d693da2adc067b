"""
Turn an extracted payload into an outbound request.

Requests are only prepared here, never sent: sending, retries and response
handling belong to the caller.
"""
import json
from typing import Any, List, Mapping, Optional, Tuple

import requests

from payloadmapper.mapping.paths import UNDEFINED

DEFAULT_METHOD = "GET"
JSON_CONTENT_TYPE = "application/json"


def _query_value(value: Any) -> Any:
    # booleans and None are written the way JSON spells them
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if value is None:
        return 'null'
    return value


def query_params(payload: Optional[Mapping[str, Any]]) -> List[Tuple[str, Any]]:
    """
    Flatten a payload into query parameters.

    Lists become repeated 'key[]' parameters and UNDEFINED values are dropped.
    Booleans become 'true'/'false' and None becomes 'null'.

    Example:
        >>> query_params({'id': 5, 'tags': ['a', 'b'], 'mine': True})
        [('id', 5), ('tags[]', 'a'), ('tags[]', 'b'), ('mine', 'true')]
    """
    params = []
    for key, value in (payload or {}).items():
        if value is UNDEFINED:
            continue
        if isinstance(value, (list, tuple)):
            params.extend((f"{key}[]", _query_value(item)) for item in value if item is not UNDEFINED)
        else:
            params.append((key, _query_value(value)))
    return params


def _json_default(value: Any) -> Any:
    if value is UNDEFINED:
        return None
    return str(value)


def build_request(
    uri: str,
    method: str = DEFAULT_METHOD,
    payload: Optional[Mapping[str, Any]] = None,
    headers: Optional[Mapping[str, str]] = None,
) -> requests.PreparedRequest:
    """
    Prepare a request for a payload.

    GET requests carry the payload in the query string (appended to any query
    already present in the URI); every other method sends it as a JSON body.

    Args:
        uri: Target URI
        method: HTTP method, case-insensitive (default: GET)
        payload: Extracted fields
        headers: Extra request headers

    Returns:
        requests.PreparedRequest, ready for requests.Session().send()
    """
    method = (method or DEFAULT_METHOD).upper()
    headers = dict(headers or {})

    if method == "GET":
        request = requests.Request(method, uri, headers=headers, params=query_params(payload))
    else:
        body = {k: v for k, v in (payload or {}).items() if v is not UNDEFINED}
        headers.setdefault("Content-Type", JSON_CONTENT_TYPE)
        request = requests.Request(
            method, uri, headers=headers,
            data=json.dumps(body, default=_json_default)
        )
    return request.prepare()
