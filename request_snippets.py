import json
import math
from pprint import pformat
from urllib.parse import urlsplit

import requests

from curl_transcoder import BODY_METHODS, HTTP_METHODS, RequestDescriptor, normalize_url


def to_requests_request(request: RequestDescriptor) -> requests.Request:
    """Build an unsent ``requests.Request``; call ``.prepare()`` to inspect it."""
    data = request.body if request.body and request.method in BODY_METHODS else None
    return requests.Request(request.method, normalize_url(request.url), headers=dict(request.headers), data=data)


def from_prepared_request(prepared: requests.PreparedRequest) -> RequestDescriptor:
    method = (prepared.method or "GET").upper()
    if method not in HTTP_METHODS:
        raise ValueError(f"Unsupported HTTP method: {method}")
    body = prepared.body
    if isinstance(body, bytes):
        body = body.decode("utf-8")
    elif body is not None and not isinstance(body, str):
        raise ValueError("Streamed request bodies cannot be exported")
    return RequestDescriptor(method=method, url=prepared.url or "", headers=dict(prepared.headers), body=body)


def default_request_name(request: RequestDescriptor) -> str:
    try:
        path = urlsplit(normalize_url(request.url)).path or "/"
    except ValueError:
        path = "/"
    return f"Imported request - {request.method} {path}"


def _reject_constant(name):
    raise ValueError(f"{name} is not valid in a Python literal")


def _finite_float(text):
    value = float(text)
    if math.isinf(value):
        raise ValueError(f"{text} is out of float range")
    return value


def build_requests_snippet(request: RequestDescriptor, timeout: int = 30) -> str:
    method, url = request.method, normalize_url(request.url)
    headers_str = json.dumps(request.headers, indent=4) if request.headers else "{}"
    body_block, body_arg = "", None
    if request.body and method in BODY_METHODS:
        try:
            payload = json.loads(request.body, parse_constant=_reject_constant, parse_float=_finite_float)
            body_block, body_arg = f"json_payload = {pformat(payload, sort_dicts=False)}\n\n", "json=json_payload"
        except ValueError:
            body_block, body_arg = f"raw_data = {request.body!r}\n\n", "data=raw_data"
    req_args = [f'"{method}"', "url", "headers=headers"]
    if body_arg: req_args.append(body_arg)
    req_args.append(f"timeout={timeout}")
    req_args_str = ",\n    ".join(req_args)
    return f"""import requests, json

url = {json.dumps(url)}
headers = {headers_str}
{body_block}response = requests.request(
    {req_args_str}
)

print(f"Status Code: {{response.status_code}}")
try:
    print(json.dumps(response.json(), indent=2))
except requests.exceptions.JSONDecodeError:
    print(response.text)"""
