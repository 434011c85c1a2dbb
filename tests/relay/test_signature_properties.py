"""Property-based tests for webhook signature verification.

Testing Configuration:
- Library: Hypothesis (Python)
- Minimum iterations: 100 per property test
"""

import hashlib
import hmac

from hypothesis import assume, given, settings, strategies as st

from src.relay.store.secret_store import generate_secret
from src.relay.webhook.signature import compute_signature, verify_signature


hex_secrets = st.text(alphabet="0123456789abcdef", min_size=64, max_size=64)
bodies = st.binary(min_size=1, max_size=4096)


def _flip_bit(data: bytes, index: int, bit: int) -> bytes:
    mutated = bytearray(data)
    mutated[index % len(mutated)] ^= 1 << bit
    return bytes(mutated)


class TestSignatureFormat:
    """The accepted signature is "sha256=" + hex(HMAC-SHA256(secret, body))."""

    @given(secret=hex_secrets, body=bodies)
    @settings(max_examples=100)
    def test_signature_matches_hmac_sha256(self, secret: str, body: bytes) -> None:
        expected = "sha256=" + hmac.new(
            secret.encode("utf-8"), body, hashlib.sha256
        ).hexdigest()

        assert compute_signature(secret, body) == expected

    @given(secret=hex_secrets, body=bodies)
    @settings(max_examples=100)
    def test_computed_signature_verifies(self, secret: str, body: bytes) -> None:
        assert verify_signature(secret, body, compute_signature(secret, body))


class TestSignatureRejection:
    """Any single-bit change to the body or the secret is rejected."""

    @given(
        secret=hex_secrets,
        body=bodies,
        index=st.integers(min_value=0, max_value=4095),
        bit=st.integers(min_value=0, max_value=7),
    )
    @settings(max_examples=100)
    def test_body_bit_flip_rejected(
        self, secret: str, body: bytes, index: int, bit: int
    ) -> None:
        signature = compute_signature(secret, body)

        assert not verify_signature(secret, _flip_bit(body, index, bit), signature)

    @given(
        secret=hex_secrets,
        body=bodies,
        index=st.integers(min_value=0, max_value=63),
        bit=st.integers(min_value=0, max_value=6),
    )
    @settings(max_examples=100)
    def test_secret_bit_flip_rejected(
        self, secret: str, body: bytes, index: int, bit: int
    ) -> None:
        signature = compute_signature(secret, body)
        mutated = bytearray(secret.encode("ascii"))
        mutated[index] ^= 1 << bit
        other_secret = mutated.decode("ascii")
        assume(other_secret != secret)

        assert not verify_signature(other_secret, body, signature)

    @given(secret=hex_secrets, body=bodies)
    @settings(max_examples=50)
    def test_missing_signature_rejected(self, secret: str, body: bytes) -> None:
        assert not verify_signature(secret, body, None)
        assert not verify_signature(secret, body, "")

    @given(secret=hex_secrets, body=bodies)
    @settings(max_examples=50)
    def test_unprefixed_digest_rejected(self, secret: str, body: bytes) -> None:
        bare = compute_signature(secret, body)[len("sha256="):]

        assert not verify_signature(secret, body, bare)


class TestGenerateSecret:
    def test_secret_is_64_lowercase_hex_characters(self):
        secret = generate_secret()

        assert len(secret) == 64
        assert all(c in "0123456789abcdef" for c in secret)

    def test_secrets_are_unique(self):
        assert len({generate_secret() for _ in range(50)}) == 50
