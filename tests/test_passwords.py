import pytest

from personaforge.services.passwords import hash_password, password_problems, verify_password


def test_hash_round_trip():
    stored = hash_password("Correct-Horse-42!", iterations=1000)

    assert stored.startswith("pbkdf2_sha256$1000$")
    assert verify_password("Correct-Horse-42!", stored)
    assert not verify_password("correct-horse-42!", stored)


def test_hashes_are_salted():
    assert hash_password("Correct-Horse-42!", iterations=1000) != hash_password(
        "Correct-Horse-42!", iterations=1000
    )


@pytest.mark.parametrize("stored", ["", "plaintext", "md5$1$abc$def"])
def test_unknown_hash_format_never_verifies(stored):
    assert not verify_password("anything", stored)


@pytest.mark.parametrize("password,ok", [
    ("Correct-Horse-42!", True),
    ("Sh0rt!", False),
    ("alllowercase-123", False),
    ("NoDigitsHere-!!", False),
    ("NoSpecials12345", False),
])
def test_password_policy(password, ok):
    assert (password_problems(password) == []) is ok

