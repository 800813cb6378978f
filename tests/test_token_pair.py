"""
Token pair issuer tests
"""

import time

import pytest

from conftest import ACCESS_SECRET, REFRESH_SECRET
from utils.errors import ConfigError, InternalError, InvalidTokenError


@pytest.mark.asyncio
async def test_issue_returns_tokens_signed_with_independent_secrets(issuer, codec):
    pair = await issuer.issue({"uid": "u1"}, ACCESS_SECRET, REFRESH_SECRET, "15m", "7d")

    assert (await codec.verify(pair.access_token, ACCESS_SECRET))["uid"] == "u1"
    assert (await codec.verify(pair.refresh_token, REFRESH_SECRET))["uid"] == "u1"

    with pytest.raises(InvalidTokenError):
        await codec.verify(pair.access_token, REFRESH_SECRET)
    with pytest.raises(InvalidTokenError):
        await codec.verify(pair.refresh_token, ACCESS_SECRET)


@pytest.mark.asyncio
async def test_issue_reports_expiry_of_each_token(issuer):
    now = time.time()

    pair = await issuer.issue({"uid": "u1"}, ACCESS_SECRET, REFRESH_SECRET, "15m", "7d")

    assert pair.access_expires_at.timestamp() == pytest.approx(now + 15 * 60, abs=2)
    assert pair.refresh_expires_at.timestamp() == pytest.approx(now + 7 * 24 * 60 * 60, abs=2)
    assert pair.access_expires_at.tzinfo is not None


@pytest.mark.asyncio
async def test_issue_without_lifetimes_reports_no_expiry(issuer):
    pair = await issuer.issue({"uid": "u1"}, ACCESS_SECRET, REFRESH_SECRET, None, None)

    assert pair.access_expires_at is None
    assert pair.refresh_expires_at is None


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "access_secret, refresh_secret",
    [(None, REFRESH_SECRET), (ACCESS_SECRET, None), ("", ""), (None, None)],
)
async def test_issue_requires_both_secrets(issuer, access_secret, refresh_secret):
    with pytest.raises(ConfigError):
        await issuer.issue({"uid": "u1"}, access_secret, refresh_secret)


@pytest.mark.asyncio
async def test_issue_wraps_unexpected_signing_failures(issuer, monkeypatch):
    async def broken_sign(*args, **kwargs):
        raise RuntimeError("signing backend down")

    monkeypatch.setattr(issuer.codec, "sign", broken_sign)

    with pytest.raises(InternalError):
        await issuer.issue({"uid": "u1"}, ACCESS_SECRET, REFRESH_SECRET)


@pytest.mark.asyncio
async def test_issue_propagates_codec_config_errors(issuer):
    with pytest.raises(ConfigError):
        await issuer.issue({"uid": "u1"}, ACCESS_SECRET, REFRESH_SECRET, "15m", "someday")
