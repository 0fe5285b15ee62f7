import jwt
import pytest

from backend.auth import jwt_handler


def test_access_token_round_trip_carries_user_claims() -> None:
    token = jwt_handler.create_access_token(subject='john@example.com', user_id=7, role='USER')

    payload = jwt_handler.decode_access_token(token)

    assert payload['sub'] == 'john@example.com'
    assert payload['user_id'] == 7
    assert payload['role'] == 'USER'
    assert payload['exp'] > payload['iat']


def test_expired_token_is_rejected() -> None:
    token = jwt_handler.create_access_token(subject='john@example.com', expires_minutes=-1)

    with pytest.raises(jwt.ExpiredSignatureError):
        jwt_handler.decode_access_token(token)
