"""Tests for identity-provider token handling."""

import pytest

from hottakes.core.errors import AuthenticationError
from hottakes.services.identity import IdentitySession, TokenIdentityProvider


@pytest.fixture()
def provider() -> TokenIdentityProvider:
    return TokenIdentityProvider("test-secret", audience="authenticated")


def test_valid_token_yields_session(provider, token_factory) -> None:
    session = provider.session_from_token(token_factory("user-1", "alice@example.com"))

    assert session == IdentitySession(user_id="user-1", email="alice@example.com")


@pytest.mark.parametrize(
    "kwargs",
    [
        {"secret": "wrong-secret"},
        {"audience": "someone-else"},
        {"expires_in": -60},
    ],
)
def test_invalid_tokens_are_rejected(provider, token_factory, kwargs) -> None:
    assert provider.session_from_token(token_factory("user-1", **kwargs)) is None


def test_garbage_token_is_rejected(provider) -> None:
    assert provider.session_from_token("not-a-jwt") is None


@pytest.mark.asyncio
async def test_sign_in_and_out_notify_subscribers(provider, token_factory) -> None:
    seen = []

    async def on_change(session):
        seen.append(session)

    unsubscribe = provider.on_session_change(on_change)

    session = await provider.sign_in(token_factory("user-1"))
    await provider.sign_in(token_factory("user-1"))
    await provider.sign_out()
    unsubscribe()
    await provider.sign_in(token_factory("user-2"))

    assert seen == [session, None]
    assert provider.get_current_session() == IdentitySession(user_id="user-2")


@pytest.mark.asyncio
async def test_sign_in_with_bad_token_raises(provider) -> None:
    with pytest.raises(AuthenticationError):
        await provider.sign_in("bogus")

    assert provider.get_current_session() is None
