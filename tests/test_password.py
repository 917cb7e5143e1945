"""
Tests for bcrypt password hashing.
"""

from auth.password import check_password, dummy_hash, hash_password, verify_password


class TestPasswordHashing:
    def test_hash_is_not_plaintext(self):
        hashed = hash_password("s3cret")
        assert hashed != "s3cret"
        assert hashed.startswith("$2")

    def test_verify_roundtrip(self):
        hashed = hash_password("s3cret")
        assert verify_password("s3cret", hashed) is True
        assert verify_password("s3cret!", hashed) is False

    def test_same_password_gets_different_salts(self):
        assert hash_password("pw1") != hash_password("pw1")

    def test_unicode_password(self):
        hashed = hash_password("pässwörd")
        assert verify_password("pässwörd", hashed)

    def test_malformed_hash_fails_closed(self):
        assert verify_password("anything", "not-a-bcrypt-hash") is False
        assert verify_password("anything", "") is False
        assert verify_password("anything", None) is False

    def test_dummy_hash_is_cached_and_never_matches_user_input(self):
        assert dummy_hash() is dummy_hash()
        assert verify_password("", dummy_hash()) is False

    def test_check_password_without_hash_never_matches(self):
        assert check_password("anything", None) is False
        hashed = hash_password("s3cret")
        assert check_password("s3cret", hashed) is True
        assert check_password("nope", hashed) is False
