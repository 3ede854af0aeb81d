# -*- coding: utf-8 -*-
"""
Tests for L2 header signing and secret handling.
"""

import base64
import copy
import hashlib
import hmac
import json
import pickle
import pytest

from clob_exec.auth import ApiCredentials, HeaderSigner, Secret, decode_secret
from clob_exec.exceptions import AuthHeaderError

from conftest import TEST_SECRET_BYTES


FIXED_NOW = 1700000000.123456


def expected_signature(key: bytes, message: bytes) -> str:
    return base64.b64encode(hmac.new(key, message, hashlib.sha256).digest()).decode()


class TestSecret:
    """Secrets never show up in text or pickles."""

    def test_repr_and_str_are_masked(self):
        secret = Secret("hunter2")
        assert "hunter2" not in repr(secret)
        assert "hunter2" not in str(secret)
        assert "hunter2" not in f"{secret}"
        assert "hunter2" not in "%s" % secret

    def test_reveal_returns_value(self):
        assert Secret("hunter2").reveal() == "hunter2"

    def test_cannot_be_pickled_or_copied(self):
        secret = Secret("hunter2")
        with pytest.raises(TypeError):
            pickle.dumps(secret)
        with pytest.raises(TypeError):
            copy.deepcopy(secret)

    def test_not_json_serializable(self):
        with pytest.raises(TypeError):
            json.dumps({"secret": Secret("hunter2")})

    def test_equality(self):
        assert Secret("a") == Secret("a")
        assert Secret("a") != Secret("b")

    def test_wrapping_a_secret_keeps_value(self):
        assert Secret(Secret("x")).reveal() == "x"

    def test_rejects_non_string(self):
        with pytest.raises(TypeError):
            Secret(123)


class TestApiCredentials:
    """Credential container behaviour."""

    def test_plain_strings_are_wrapped(self, api_credentials):
        assert isinstance(api_credentials.api_secret, Secret)
        assert isinstance(api_credentials.passphrase, Secret)

    def test_repr_hides_secrets(self, api_credentials, api_secret):
        text = repr(api_credentials)
        assert api_secret not in text
        assert "correct-horse-battery" not in text
        assert api_credentials.api_key in text

    def test_key_prefix(self, api_credentials):
        assert api_credentials.key_prefix == "a1b2c3d4"

    def test_validate(self, api_credentials):
        assert api_credentials.validate()
        assert not ApiCredentials(api_key="", api_secret="x", passphrase="y").validate()


class TestDecodeSecret:
    """URL-safe base64 decoding of the API secret."""

    def test_unpadded(self, api_secret):
        assert not api_secret.endswith("=")
        assert decode_secret(Secret(api_secret)) == TEST_SECRET_BYTES

    def test_padded(self):
        padded = base64.urlsafe_b64encode(b"abcd").decode()
        assert padded.endswith("=")
        assert decode_secret(Secret(padded)) == b"abcd"

    def test_urlsafe_characters(self):
        raw = bytes([0xfb, 0xff, 0xfe])
        encoded = base64.urlsafe_b64encode(raw).decode()
        assert "-" in encoded or "_" in encoded
        assert decode_secret(Secret(encoded)) == raw

    @pytest.mark.parametrize("bad", ["not base64!", "abc+/def", "", "a b"])
    def test_malformed_secret(self, bad):
        with pytest.raises(AuthHeaderError):
            decode_secret(Secret(bad))

    def test_error_does_not_leak_secret(self):
        with pytest.raises(AuthHeaderError) as exc_info:
            decode_secret(Secret("leaky secret value"))
        assert "leaky" not in str(exc_info.value)


class TestHeaderSigner:
    """HMAC header computation."""

    def test_signature_matches_reference(self, api_credentials):
        signer = HeaderSigner(api_credentials)
        body = b'{"order":{"salt":1},"owner":"k","orderType":"GTC"}'
        signature = signer.sign("1700000000123", "POST", "/orders", body)

        message = b"1700000000123POST/orders" + body
        assert signature == expected_signature(TEST_SECRET_BYTES, message)

    def test_signature_uses_standard_padded_alphabet(self, api_credentials):
        signature = HeaderSigner(api_credentials).sign("1", "POST", "/orders", b"x")
        assert len(signature) == 44
        assert signature.endswith("=")
        assert base64.b64decode(signature, validate=True)

    def test_raw_secret_key_convention(self, api_credentials, api_secret):
        signer = HeaderSigner(api_credentials, raw_secret_key=True)
        signature = signer.sign("1700000000123", "POST", "/orders", b"{}")

        message = b"1700000000123POST/orders{}"
        assert signature == expected_signature(api_secret.encode(), message)
        assert signature != HeaderSigner(api_credentials).sign(
            "1700000000123", "POST", "/orders", b"{}"
        )

    def test_deterministic(self, api_credentials):
        signer = HeaderSigner(api_credentials)
        args = ("1700000000123", "POST", "/orders", b'{"a":1}')
        assert signer.sign(*args) == signer.sign(*args)

    @pytest.mark.parametrize(
        "changed",
        [
            ("1700000000124", "POST", "/orders", b'{"a":1}'),
            ("1700000000123", "GET", "/orders", b'{"a":1}'),
            ("1700000000123", "POST", "/order", b'{"a":1}'),
            ("1700000000123", "POST", "/orders", b'{"a":2}'),
            ("1700000000123", "POST", "/orders", b'{"a":1} '),
        ],
    )
    def test_any_input_change_changes_signature(self, api_credentials, changed):
        signer = HeaderSigner(api_credentials)
        base = signer.sign("1700000000123", "POST", "/orders", b'{"a":1}')
        assert signer.sign(*changed) != base

    def test_build_headers(self, api_credentials):
        signer = HeaderSigner(api_credentials, clock=lambda: FIXED_NOW)
        body = b'{"x":1}'
        headers = signer.build_headers("POST", "/orders", body)

        assert headers["POLY-API-KEY"] == api_credentials.api_key
        assert headers["POLY-API-TIMESTAMP"] == "1700000000123"
        assert headers["POLY-API-PASSPHRASE"] == "correct-horse-battery"
        assert headers["POLY-API-SIGNATURE-TYPE"] == "GnosisSafe"
        assert headers["Content-Type"] == "application/json"
        assert headers["POLY-API-SIGNATURE"] == expected_signature(
            TEST_SECRET_BYTES, b"1700000000123POST/orders" + body
        )

    def test_timestamp_is_taken_per_call(self, api_credentials):
        now = [1700000000.0]
        signer = HeaderSigner(api_credentials, clock=lambda: now[0])

        first = signer.build_headers("POST", "/orders", b"{}")
        now[0] += 1.5
        second = signer.build_headers("POST", "/orders", b"{}")

        assert first["POLY-API-TIMESTAMP"] == "1700000000000"
        assert second["POLY-API-TIMESTAMP"] == "1700000001500"
        assert first["POLY-API-SIGNATURE"] != second["POLY-API-SIGNATURE"]

    def test_timestamp_is_whole_milliseconds(self, api_credentials):
        signer = HeaderSigner(api_credentials)
        timestamp = signer.timestamp()
        assert timestamp.isdigit()
        assert len(timestamp) == 13

    def test_relative_path_rejected(self, api_credentials):
        signer = HeaderSigner(api_credentials)
        with pytest.raises(AuthHeaderError):
            signer.build_headers("POST", "https://host/orders", b"{}")

    def test_line_break_in_header_rejected(self, api_secret):
        credentials = ApiCredentials(
            api_key="key\r\nInjected: yes", api_secret=api_secret, passphrase="p"
        )
        with pytest.raises(AuthHeaderError):
            HeaderSigner(credentials).build_headers("POST", "/orders", b"{}")

    def test_malformed_secret_raises_auth_header_error(self):
        credentials = ApiCredentials(api_key="key", api_secret="bad secret!", passphrase="p")
        with pytest.raises(AuthHeaderError):
            HeaderSigner(credentials).build_headers("POST", "/orders", b"{}")
