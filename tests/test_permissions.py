import pytest

from waypoint.auth.auth_utils import (
    create_access_token,
    create_refresh_token,
    decode_token,
    hash_password,
    verify_password,
)
from waypoint.auth.permissions import Identity, authorize
from waypoint.config.settings import settings
from waypoint.utils.exceptions import UnauthorizedError


def test_authorize_passes_matching_role() -> None:
    identity = Identity(username="ada", role="developer")
    assert authorize(identity, "developer") is identity


@pytest.mark.parametrize("role,required", [("admin", "developer"), ("developer", "admin"), ("guest", "developer")])
def test_authorize_rejects_other_roles(role: str, required: str) -> None:
    with pytest.raises(UnauthorizedError) as excinfo:
        authorize(Identity(username="ada", role=role), required)
    assert excinfo.value.status_code == 403
    assert excinfo.value.metadata["required"] == required


def test_access_token_carries_user_and_role() -> None:
    payload = decode_token(create_access_token("ada", "admin"), settings.ACCESS_SECRET_KEY)
    assert payload["user"] == "ada"
    assert payload["role"] == "admin"


def test_tokens_are_bound_to_their_secret() -> None:
    refresh = create_refresh_token("ada", "developer")
    assert decode_token(refresh, settings.ACCESS_SECRET_KEY) is None
    assert decode_token(refresh, settings.REFRESH_SECRET_KEY)["user"] == "ada"
    assert decode_token("not-a-token", settings.ACCESS_SECRET_KEY) is None


def test_password_hashing() -> None:
    hashed = hash_password("hunter2")
    assert hashed != "hunter2"
    assert verify_password("hunter2", hashed)
    assert not verify_password("hunter3", hashed)
    assert not verify_password("hunter2", "plain-text")
