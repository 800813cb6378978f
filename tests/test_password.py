"""
Password hashing tests
"""

import pytest

from security.password import PasswordHasher
from utils.errors import ValidationError


@pytest.mark.asyncio
async def test_hash_is_salted_and_verifiable(hasher):
    first = await hasher.hash("secret123")
    second = await hasher.hash("secret123")

    assert first != second
    assert first.startswith("$2")
    assert await hasher.compare("secret123", first)
    assert await hasher.compare("secret123", second)


@pytest.mark.asyncio
async def test_hash_uses_configured_cost_factor():
    hasher = PasswordHasher(rounds=5)

    hashed = await hasher.hash("secret123")

    assert hashed.split("$")[2] == "05"


@pytest.mark.asyncio
async def test_hash_rejects_empty_password(hasher):
    with pytest.raises(ValidationError):
        await hasher.hash("")


@pytest.mark.asyncio
async def test_compare_rejects_wrong_password(hasher):
    hashed = await hasher.hash("secret123")

    assert await hasher.compare("secret124", hashed) is False


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "plaintext, hashed",
    [
        ("secret123", "not-a-bcrypt-hash"),
        ("secret123", ""),
        ("secret123", None),
        ("", "$2b$04$abcdefghijklmnopqrstuuJ3pBqVY3Zb9Z3iCkq5nX0JqkVh5P5e6"),
        (None, None),
    ],
)
async def test_compare_fails_closed(hasher, plaintext, hashed):
    assert await hasher.compare(plaintext, hashed) is False


@pytest.mark.asyncio
async def test_compare_is_stable_across_calls(hasher):
    hashed = await hasher.hash("secret123")

    for candidate in ("secret123", "wrong"):
        first = await hasher.compare(candidate, hashed)
        second = await hasher.compare(candidate, hashed)
        assert first == second

    assert await hasher.compare("x", "garbage") == await hasher.compare("x", "garbage")


@pytest.mark.asyncio
async def test_compare_dummy_never_matches(hasher):
    assert await hasher.compare_dummy("dummy_password_for_timing_attack_prevention") is False
    assert await hasher.compare_dummy(None) is False
