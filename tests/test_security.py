import pytest
from jose import jwt

from app.core.exceptions import UnauthorizedError
from app.core.security import Principal, TokenVerifier

SECRET = "test-secret"


def _token(claims, secret=SECRET):
    return jwt.encode(claims, secret, algorithm="HS256")


@pytest.fixture
def verifier():
    return TokenVerifier("", secret=SECRET)


async def test_valid_token_yields_principal(verifier):
    token = _token({"sub": "user-9", "permissions": ["vehicle.access", "shipping.edit"]})

    principal = await verifier.authenticate(f"Bearer {token}")

    assert principal.user_id == "user-9"
    assert principal.has("shipping.edit")
    assert not principal.has("vehicle.delete")
    assert principal.authorization == f"Bearer {token}"


@pytest.mark.parametrize(
    "header, message",
    [
        (None, "Missing authorization header"),
        ("", "Missing authorization header"),
        ("Token abc", "Invalid authorization header format"),
        ("Bearer", "Invalid authorization header format"),
        ("Bearer a b", "Invalid authorization header format"),
    ],
)
async def test_malformed_headers(verifier, header, message):
    with pytest.raises(UnauthorizedError) as exc:
        await verifier.authenticate(header)
    assert exc.value.message == message


async def test_wrong_signature_is_rejected(verifier):
    token = _token({"sub": "x", "permissions": []}, secret="other")
    with pytest.raises(UnauthorizedError):
        await verifier.authenticate(f"Bearer {token}")


async def test_permissions_claim_must_be_a_list(verifier):
    token = _token({"sub": "x", "permissions": "vehicle.access"})
    with pytest.raises(UnauthorizedError):
        await verifier.authenticate(f"Bearer {token}")


async def test_unconfigured_verifier_rejects_everything():
    with pytest.raises(UnauthorizedError):
        await TokenVerifier("").authenticate(f"Bearer {_token({'sub': 'x'})}")


def test_principal_has():
    p = Principal(user_id="u", permissions=frozenset({"a"}))
    assert p.has("a") and not p.has("b")
