"""Unit tests for password hashing and the entropy gate."""

from __future__ import annotations

import math

import pytest

from subtrack.auth.errors import InputTooLongError, WeakPasswordError
from subtrack.auth.password import PasswordPolicy, PasswordVerifier, estimate_entropy
from tests.helpers.utils import not_raises

STRONG = "Syp9393-Syp9292-Syp9191"


@pytest.fixture()
def verifier() -> PasswordVerifier:
    return PasswordVerifier(PasswordPolicy(hash_cost=4))


class TestHashing:
    def test_round_trip(self, verifier):
        hashed = verifier.create_hash(STRONG)

        assert hashed.startswith("$2b$04$")
        assert verifier.is_valid(STRONG, hashed)
        assert not verifier.is_valid(STRONG + "x", hashed)

    def test_salts_differ(self, verifier):
        assert verifier.create_hash(STRONG) != verifier.create_hash(STRONG)

    def test_77_chars_is_too_long(self, verifier):
        with pytest.raises(InputTooLongError):
            verifier.create_hash("a" * 77)

    def test_72_bytes_is_accepted(self, verifier):
        with not_raises(InputTooLongError):
            verifier.create_hash("a" * 72)

    def test_limit_counts_utf8_bytes(self, verifier):
        # 37 two-byte characters = 74 bytes
        with pytest.raises(InputTooLongError):
            verifier.create_hash("é" * 37)

    def test_over_long_candidate_never_matches(self, verifier):
        hashed = verifier.create_hash("a" * 72)

        assert not verifier.is_valid("a" * 73, hashed)

    @pytest.mark.parametrize("bad_hash", ["", "not-a-bcrypt-hash", "$2b$04$short"])
    def test_malformed_hash_is_false(self, verifier, bad_hash):
        assert verifier.is_valid(STRONG, bad_hash) is False


class TestEntropy:
    def test_threshold_matches_policy(self):
        policy = PasswordPolicy()

        assert policy.min_entropy_bits == pytest.approx(12 * math.log2(89))

    def test_empty_is_zero(self):
        assert estimate_entropy("") == 0.0

    def test_mixed_classes_score_higher(self):
        assert estimate_entropy("Abc1-xyz9") > estimate_entropy("abcdxyzq")

    def test_repeats_do_not_count(self):
        assert estimate_entropy("aaaaaaaaaaaaaaaaaaaa") == estimate_entropy("aa")

    def test_sequences_are_discounted(self):
        assert estimate_entropy("abcdefgh") < estimate_entropy("aqzmwkxp")

    def test_strong_password_passes(self, verifier):
        bits = verifier.check_strength(STRONG)

        assert bits >= verifier.policy.min_entropy_bits

    @pytest.mark.parametrize("weak", ["password", "Password1", "aaaaaaaaaaaaaaaaaaaaaaaa"])
    def test_weak_password_fails(self, verifier, weak):
        with pytest.raises(WeakPasswordError) as info:
            verifier.check_strength(weak)

        assert info.value.required_bits == pytest.approx(verifier.policy.min_entropy_bits)
