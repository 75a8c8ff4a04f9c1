"""
Tests de la verificación de firma de webhooks y del token del trigger de sync.
"""
from datetime import datetime, timedelta, timezone

import pytest

from app.core.security import WebhookSignatureVerifier, compute_signature, verify_bearer_token
from app.shared.exceptions.auth import UnauthorizedException, WebhookAuthException


SECRET = "s3cret"
NOW = datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)
BODY = b'{"triggerType":"collection_item_changed","payload":{"id":"s1"}}'


def _verifier(**kwargs) -> WebhookSignatureVerifier:
    return WebhookSignatureVerifier(SECRET, clock=lambda: NOW, **kwargs)


def _headers(sent_at: datetime, body: bytes = BODY, *, millis: bool = False) -> dict:
    epoch = int(sent_at.timestamp() * 1000) if millis else int(sent_at.timestamp())
    timestamp = str(epoch)
    return {
        "X-Webflow-Timestamp": timestamp,
        "X-Webflow-Signature": compute_signature(SECRET, timestamp, body),
    }


def _reason(headers, body: bytes = BODY) -> str:
    with pytest.raises(WebhookAuthException) as exc_info:
        _verifier().verify(headers, body)
    assert exc_info.value.status_code == 401
    return exc_info.value.reason


def test_valid_signature_is_accepted() -> None:
    _verifier().verify(_headers(NOW), BODY)


def test_millisecond_timestamps_are_accepted() -> None:
    _verifier().verify(_headers(NOW - timedelta(seconds=10), millis=True), BODY)


@pytest.mark.parametrize("mangle", [str.upper, lambda sig: f" {sig} ", lambda sig: sig + "\u00e9"])
def test_signature_must_match_exactly_as_received(mangle) -> None:
    headers = _headers(NOW)
    headers["X-Webflow-Signature"] = mangle(headers["X-Webflow-Signature"])

    assert _reason(headers) == WebhookAuthException.INVALID_SIGNATURE


def test_freshness_window_boundary() -> None:
    _verifier().verify(_headers(NOW - timedelta(seconds=300)), BODY)

    assert _reason(_headers(NOW - timedelta(seconds=301))) == WebhookAuthException.STALE_TIMESTAMP
    assert _reason(_headers(NOW + timedelta(seconds=301))) == WebhookAuthException.STALE_TIMESTAMP


def test_tampered_body_is_rejected() -> None:
    headers = _headers(NOW)

    assert _reason(headers, BODY + b" ") == WebhookAuthException.INVALID_SIGNATURE


def test_missing_headers_are_rejected() -> None:
    headers = _headers(NOW)

    assert _reason({"X-Webflow-Timestamp": headers["X-Webflow-Timestamp"]}) == WebhookAuthException.MISSING_HEADERS
    assert _reason({"X-Webflow-Signature": headers["X-Webflow-Signature"]}) == WebhookAuthException.MISSING_HEADERS


def test_unparseable_timestamp_is_rejected() -> None:
    headers = {"X-Webflow-Timestamp": "ayer", "X-Webflow-Signature": "abc"}

    assert _reason(headers) == WebhookAuthException.INVALID_TIMESTAMP


def test_custom_header_names() -> None:
    verifier = _verifier(timestamp_header="X-Ts", signature_header="X-Sig")
    timestamp = str(int(NOW.timestamp()))

    verifier.verify({"x-ts": timestamp, "x-sig": compute_signature(SECRET, timestamp, BODY)}, BODY)


def test_without_secret_everything_is_accepted() -> None:
    verifier = WebhookSignatureVerifier("")

    assert verifier.enabled is False
    verifier.verify({}, BODY)


def test_bearer_token_is_accepted() -> None:
    verify_bearer_token("Bearer tok-1", "tok-1")
    verify_bearer_token("bearer tok-1", "tok-1")


@pytest.mark.parametrize(
    "authorization, expected",
    [
        (None, "tok-1"),
        ("", "tok-1"),
        ("tok-1", "tok-1"),
        ("Basic tok-1", "tok-1"),
        ("Bearer otro", "tok-1"),
        ("Bearer tok-1", ""),
        ("Bearer tok-1", None),
    ],
)
def test_bearer_token_rejections(authorization, expected) -> None:
    with pytest.raises(UnauthorizedException):
        verify_bearer_token(authorization, expected)
