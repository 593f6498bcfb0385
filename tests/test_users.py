import pytest

from refman.auth.session import issue_token, verify_token
from refman.auth.users import get_user, register, verify_credentials
from refman.errors import ConflictError, UserNotFoundError, ValidationError, WrongPasswordError


def test_register_then_verify_credentials():
    user = register("Ada", "Lovelace", "ada", "pw12345")
    assert user.id
    assert user.password_hash != "pw12345"

    found = verify_credentials("ada", "pw12345")
    assert found.id == user.id
    claims = verify_token(issue_token(found.as_token_subject()))
    assert claims.subject_id == user.id


def test_register_trims_fields():
    user = register("  Ada ", " Lovelace", "  ada  ", "pw12345")
    assert user.username == "ada"
    assert user.first_name == "Ada"
    assert verify_credentials("ada", "pw12345").id == user.id


def test_duplicate_username_is_a_conflict_and_keeps_original(mongo):
    original = register("Ada", "Lovelace", "ada", "pw12345")
    with pytest.raises(ConflictError):
        register("Other", "Person", "ada", "different")

    assert mongo["refman"]["users"].count_documents({"username": "ada"}) == 1
    again = verify_credentials("ada", "pw12345")
    assert again.id == original.id
    assert again.first_name == "Ada"


@pytest.mark.parametrize(
    "args",
    [
        ("", "L", "u", "pw"),
        ("F", "", "u", "pw"),
        ("F", "L", "", "pw"),
        ("F", "L", "u", ""),
    ],
)
def test_register_requires_all_fields(args):
    with pytest.raises(ValidationError):
        register(*args)


def test_unknown_username_and_wrong_password_are_distinct():
    register("Ada", "Lovelace", "ada", "pw12345")
    with pytest.raises(UserNotFoundError):
        verify_credentials("nobody", "pw12345")
    with pytest.raises(WrongPasswordError):
        verify_credentials("ada", "wrong")


def test_password_is_never_stored_in_plaintext(mongo):
    register("Ada", "Lovelace", "ada", "pw12345")
    doc = mongo["refman"]["users"].find_one({"username": "ada"})
    assert "password" not in doc
    assert "pw12345" not in str(doc)


def test_get_user_by_id():
    user = register("Ada", "Lovelace", "ada", "pw12345")
    assert get_user(user.id).username == "ada"
    assert get_user("not-an-id") is None
    assert get_user("64b7f0c2a1b2c3d4e5f60718") is None
