"""Tests for SHA-256, HKDF and ChaCha20 keystream primitives."""
from __future__ import annotations

import pytest

from provenance_mark.crypto.primitives import (
    extend_key,
    hkdf_sha256,
    keystream,
    sha256,
    sha256_prefix,
)


class TestSha256:

    def test_known_digest(self):
        assert sha256(b"Hello World").hex() == (
            "a591a6d40bf420404a011733cfb7b190d62c65bf0bcda32b57b277d9ad9f146e"
        )

    def test_prefix(self):
        assert sha256_prefix(b"Hello World", 4).hex() == "a591a6d4"

    def test_prefix_bounds(self):
        with pytest.raises(ValueError):
            sha256_prefix(b"x", 0)
        with pytest.raises(ValueError):
            sha256_prefix(b"x", 33)


class TestExtendKey:

    def test_known_value(self):
        assert extend_key(b"Hello World").hex() == (
            "813085a508d5fec645abe5a1fb9a23c2a6ac6bef0a99650017b3ef50538dba39"
        )

    def test_length(self):
        assert len(extend_key(b"")) == 32

    def test_salt_changes_output(self):
        assert hkdf_sha256(b"k", 16) != hkdf_sha256(b"k", 16, salt=b"s")

    def test_info_changes_output(self):
        assert hkdf_sha256(b"k", 16, info=b"a") != hkdf_sha256(b"k", 16, info=b"b")


class TestKeystream:

    def test_known_value(self):
        stream = keystream(b"Hello", 5)
        masked = bytes(m ^ s for m, s in zip(b"World", stream))
        assert masked.hex() == "c43889aafa"

    def test_deterministic(self):
        assert keystream(b"key", 32) == keystream(b"key", 32)

    def test_prefix_stable(self):
        """A shorter stream is a prefix of a longer one."""
        assert keystream(b"key", 64)[:8] == keystream(b"key", 8)

    def test_different_keys(self):
        assert keystream(b"key-a", 16) != keystream(b"key-b", 16)
