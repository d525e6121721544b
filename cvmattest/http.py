"""HTTP transport for attestation requests and instance-metadata calls."""

from __future__ import annotations

import enum
import json
import logging
import time
from typing import Any

import requests

from .errors import AttestationError, ErrorCode

_log = logging.getLogger(__name__)

MAX_RETRIES = 3

HTTP_STATUS_OK = 200
HTTP_STATUS_ATTESTATION_FAILURE = 400
HTTP_STATUS_RESOURCE_NOT_FOUND = 404
HTTP_STATUS_TOO_MANY_REQUESTS = 429
HTTP_STATUS_SERVER_ERROR = 500

IMDS_TIMEOUT_SECONDS = 300

_ATTESTATION_BACKOFF_SECONDS = 5
_IMDS_BACKOFF_SECONDS = 30

_SEND_FAILED_PREFIX = "Failed sending curl request with error:"


class HttpVerb(enum.Enum):
    """HTTP method used for a metadata request."""

    GET = "GET"
    POST = "POST"


def _pick(obj: dict[str, Any], camel: str, lower: str) -> Any:
    # Server errors use capitalised keys; every other error uses lower case.
    return obj.get(camel) if camel in obj else obj.get(lower)


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (str, int, float)):
        return str(value)
    return ""


def extract_error_message(http_response: str) -> str:
    """Return ``code:message`` from a JSON error response, or "" if none is found."""
    try:
        response = json.loads(http_response)
    except ValueError:
        _log.error("Failed to parse http response")
        return ""
    if not isinstance(response, dict):
        _log.error("Failed to find error obj in http response")
        return ""

    error_obj = _pick(response, "Error", "error")
    if not isinstance(error_obj, dict):
        _log.error("Failed to find error obj in http response")
        return ""

    error_code = _as_text(_pick(error_obj, "Code", "code"))
    if not error_code:
        _log.error("Failed to get error code from http response")
        return ""

    error_message = _as_text(_pick(error_obj, "Message", "message"))
    if not error_message:
        _log.error("Failed to get error message from http response")
        return ""

    return f"{error_code}:{error_message}"


def _send_failed(exc: requests.RequestException) -> AttestationError:
    _log.error("Failed sending request with error:%s", exc)
    return AttestationError(ErrorCode.ERROR_SENDING_CURL_REQUEST_FAILED, f"{_SEND_FAILED_PREFIX}{exc}")


def send_request(url: str, payload: str, session: requests.Session | None = None) -> str:
    """POST a JSON payload to the attestation endpoint and return the response body.

    Server errors (5xx) are retried up to three times with exponential backoff.
    """
    http = session if session is not None else requests.Session()
    headers = {"Content-Type": "application/json"}
    body = payload.encode("utf-8")

    retries = 0
    while True:
        try:
            response = http.post(url, data=body, headers=headers)
        except requests.RequestException as exc:
            raise _send_failed(exc) from exc

        status = response.status_code
        text = response.text
        if status == HTTP_STATUS_OK:
            return text
        if status == HTTP_STATUS_ATTESTATION_FAILURE:
            _log.error("Attestation failed with error code:%d description:%s", status, text)
            raise AttestationError(ErrorCode.ERROR_ATTESTATION_FAILED, text)
        if status >= HTTP_STATUS_SERVER_ERROR:
            _log.error("Http Request failed with error:%d description:%s", status, text)
            if retries == MAX_RETRIES:
                _log.error("Maximum retries exceeded.")
                raise AttestationError(ErrorCode.ERROR_HTTP_REQUEST_EXCEEDED_RETRIES, text)
            _log.info("Retrying")
            time.sleep(_ATTESTATION_BACKOFF_SECONDS * 2**retries)
            retries += 1
            continue
        _log.error("Http Request failed with error:%d description:%s", status, text)
        raise AttestationError(ErrorCode.ERROR_HTTP_REQUEST_FAILED, text)


class HttpClient:
    """Client for requests to the instance metadata service."""

    def __init__(self, session: requests.Session | None = None) -> None:
        self.session = session if session is not None else requests.Session()

    def invoke_imds_request(
        self,
        url: str,
        http_verb: HttpVerb = HttpVerb.GET,
        request_body: str = "",
    ) -> str:
        """Send a metadata request and return the non-empty response body.

        Not-found, throttled and server-error responses are retried up to
        three times, waiting 30, 60 and 120 seconds.
        """
        headers = {"Metadata": "true"}
        data: bytes | None = None
        if http_verb is HttpVerb.POST:
            if not request_body:
                _log.error("Request body missing for POST request")
                raise AttestationError(
                    ErrorCode.ERROR_EMPTY_REQUEST_BODY, "Request body missing for POST request"
                )
            data = request_body.encode("utf-8")

        retries = 0
        while True:
            try:
                response = self.session.request(
                    http_verb.value,
                    url,
                    data=data,
                    headers=headers,
                    timeout=IMDS_TIMEOUT_SECONDS,
                )
            except requests.RequestException as exc:
                raise _send_failed(exc) from exc

            status = response.status_code
            text = response.text
            if status == HTTP_STATUS_OK:
                if not text:
                    _log.error("Empty response received")
                    raise AttestationError(ErrorCode.ERROR_EMPTY_RESPONSE, "Empty response received")
                return text
            if status in (HTTP_STATUS_RESOURCE_NOT_FOUND, HTTP_STATUS_TOO_MANY_REQUESTS) or (
                status >= HTTP_STATUS_SERVER_ERROR
            ):
                if retries == MAX_RETRIES:
                    _log.error("Http Request failed with error:%d description:%s", status, text)
                    raise AttestationError(ErrorCode.ERROR_HTTP_REQUEST_EXCEEDED_RETRIES, text)
                _log.error("HTTP request failed with response code:%d description:%s", status, text)
                _log.info("Retrying HTTP request:%d", retries)
                time.sleep(_IMDS_BACKOFF_SECONDS * 2**retries)
                retries += 1
                continue
            _log.error("HTTP request failed with response code:%d description:%s", status, text)
            raise AttestationError(ErrorCode.ERROR_HTTP_REQUEST_FAILED, text)