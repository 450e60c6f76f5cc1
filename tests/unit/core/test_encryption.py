"""
Unit tests for Fernet token encryption.
"""
import pytest

from hail_sync.core.encryption import decrypt_optional, decrypt_token, encrypt_optional, encrypt_token


class TestEncryption:
    def test_encrypt_decrypt_roundtrip(self):
        encrypted = encrypt_token("FAKE_ACCESS_TOKEN_FOR_TESTS")

        assert encrypted != "FAKE_ACCESS_TOKEN_FOR_TESTS"
        assert decrypt_token(encrypted) == "FAKE_ACCESS_TOKEN_FOR_TESTS"

    def test_same_token_encrypts_differently_each_time(self):
        assert encrypt_token("same") != encrypt_token("same")

    def test_empty_token_is_rejected(self):
        with pytest.raises(ValueError):
            encrypt_token("  ")

    def test_tampered_ciphertext_is_rejected(self):
        encrypted = encrypt_token("FAKE_REFRESH_TOKEN_FOR_TESTS")

        with pytest.raises(ValueError, match="authorised again"):
            decrypt_token(encrypted[:-4] + "AAAA")

    def test_optional_helpers_pass_none_through(self):
        assert encrypt_optional(None) is None
        assert decrypt_optional("") is None
        assert decrypt_optional(encrypt_optional("value")) == "value"
