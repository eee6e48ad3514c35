import jwt
import pytest

from koperasi.core.errors import ConflictError, InvalidInputError, InvalidStateError, KoperasiError, NotFoundError
from koperasi.core.security import create_access_token, decode_token, hash_password, verify_password


def test_password_hash_roundtrip_and_long_passwords():
    h = hash_password("rahasia-koperasi")
    assert verify_password("rahasia-koperasi", h)
    assert not verify_password("salah", h)

    # only the first 72 bytes matter to bcrypt
    long_pw = "x" * 100
    assert verify_password("x" * 80, hash_password(long_pw))


def test_token_carries_role_and_uid():
    claims = decode_token(create_access_token(sub="admin", role="admin", uid=7))
    assert claims["sub"] == "admin"
    assert claims["role"] == "admin"
    assert claims["uid"] == 7
    assert claims["exp"] > claims["iat"]


def test_tampered_token_is_rejected():
    token = create_access_token(sub="m", role="member", uid=1)
    with pytest.raises(jwt.InvalidTokenError):
        decode_token(token[:-2] + ("AA" if not token.endswith("AA") else "BB"))


@pytest.mark.parametrize(
    "cls, kind",
    [
        (NotFoundError, "not_found"),
        (InvalidStateError, "invalid_state"),
        (ConflictError, "conflict"),
        (InvalidInputError, "validation_error"),
    ],
)
def test_error_kinds(cls, kind):
    err = cls("some_code", "Something happened")
    assert isinstance(err, KoperasiError)
    assert err.kind == kind
    assert err.code == "some_code"
    assert err.message == "Something happened"
    assert str(err) == "Something happened"
    assert cls("bare").message == "bare"
