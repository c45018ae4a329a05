"""
Unit Tests for RecaptchaVerifier
"""
import httpx
import pytest

from seminar.services.bot_verification import RecaptchaVerifier


def verifier_returning(handler, **kwargs):
    return RecaptchaVerifier(
        secret_key="secret",
        verify_url="https://recaptcha.test/siteverify",
        min_score=0.5,
        enabled=True,
        transport=httpx.MockTransport(handler),
        **kwargs,
    )


@pytest.mark.asyncio
async def test_accepts_high_score():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["body"] = request.content.decode()
        return httpx.Response(200, json={"success": True, "score": 0.9})

    result = await verifier_returning(handler).verify("token-1", "10.0.0.5")

    assert result.success is True
    assert result.score == 0.9
    assert "response=token-1" in seen["body"]
    assert "remoteip=10.0.0.5" in seen["body"]


@pytest.mark.asyncio
@pytest.mark.parametrize("body, reason", [
    ({"success": True, "score": 0.2}, "low score"),
    ({"success": True}, "low score"),
    ({"success": False, "error-codes": ["invalid-input-response"]}, "invalid-input-response"),
])
async def test_rejections(body, reason):
    result = await verifier_returning(lambda request: httpx.Response(200, json=body)).verify("t")

    assert result.success is False
    assert result.reason == reason


@pytest.mark.asyncio
async def test_network_failure_is_a_rejection():
    def handler(request):
        raise httpx.ConnectError("unreachable", request=request)

    result = await verifier_returning(handler).verify("t")

    assert result.success is False
    assert result.reason == "network error"


@pytest.mark.asyncio
async def test_timeout_is_a_rejection():
    def handler(request):
        raise httpx.ReadTimeout("slow", request=request)

    result = await verifier_returning(handler).verify("t")

    assert result.reason == "timeout"


@pytest.mark.asyncio
async def test_non_json_body():
    result = await verifier_returning(lambda request: httpx.Response(200, text="<html>")).verify("t")

    assert result.success is False
    assert result.reason == "invalid response"


@pytest.mark.asyncio
async def test_missing_secret_rejects():
    result = await RecaptchaVerifier(secret_key="", enabled=True).verify("t")

    assert result.success is False


@pytest.mark.asyncio
async def test_disabled_accepts_everything():
    result = await RecaptchaVerifier(enabled=False).verify("")

    assert result.success is True
