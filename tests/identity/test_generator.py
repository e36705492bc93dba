"""Tests for identity generator."""

import re
import pytest
from sqlblueprint.contracts.descriptors import GeneratedIdentities
from sqlblueprint.identity.generator import IdentityGenerator
from sqlblueprint.utils.errors import IdentityGenerationError


class TestSuffix:
    """Test instance-name suffix generation."""

    def test_suffix_is_four_byte_hex(self, generator):
        assert re.fullmatch(r"[0-9a-f]{8}", generator.generate_suffix())

    def test_suffix_is_memoized(self, generator, entropy):
        first = generator.generate_suffix()
        second = generator.generate_suffix()

        assert first == second
        assert entropy.calls == 1

    def test_previous_suffix_is_reused(self, entropy):
        generator = IdentityGenerator(entropy=entropy, previous=GeneratedIdentities(suffix="deadbeef"))

        assert generator.generate_suffix() == "deadbeef"
        assert entropy.calls == 0


class TestFallbackSecret:
    """Test fallback secret generation."""

    def test_secret_is_eight_byte_hex(self, generator):
        assert re.fullmatch(r"[0-9a-f]{16}", generator.generate_fallback_secret(keyed_by="db"))

    def test_secret_is_memoized_per_key(self, generator, entropy):
        first = generator.generate_fallback_secret(keyed_by="db")
        second = generator.generate_fallback_secret(keyed_by="db")

        assert first == second
        assert entropy.calls == 1

    def test_new_key_rotates_secret(self, generator):
        assert generator.generate_fallback_secret(keyed_by="db-a") != generator.generate_fallback_secret(keyed_by="db-b")

    def test_previous_secret_reused_for_same_keeper(self, entropy):
        previous = GeneratedIdentities(fallback_secret="00112233445566aa", fallback_secret_keeper="db")
        generator = IdentityGenerator(entropy=entropy, previous=previous)

        assert generator.generate_fallback_secret(keyed_by="db") == "00112233445566aa"
        assert entropy.calls == 0

    def test_previous_secret_rotated_on_rename(self, entropy):
        previous = GeneratedIdentities(fallback_secret="00112233445566aa", fallback_secret_keeper="db")
        generator = IdentityGenerator(entropy=entropy, previous=previous)

        assert generator.generate_fallback_secret(keyed_by="db-renamed") != "00112233445566aa"
        assert entropy.calls == 1


class TestSnapshot:
    """Test persisting generated values."""

    def test_snapshot_records_values(self, generator):
        suffix = generator.generate_suffix()
        secret = generator.generate_fallback_secret(keyed_by="db")

        snapshot = generator.snapshot()
        assert snapshot.suffix == suffix
        assert snapshot.fallback_secret == secret
        assert snapshot.fallback_secret_keeper == "db"

    def test_snapshot_keeps_unused_previous_secret(self, entropy):
        previous = GeneratedIdentities(fallback_secret="00112233445566aa", fallback_secret_keeper="db")
        generator = IdentityGenerator(entropy=entropy, previous=previous)

        snapshot = generator.snapshot()
        assert snapshot.fallback_secret == "00112233445566aa"
        assert snapshot.fallback_secret_keeper == "db"

    def test_empty_snapshot(self, generator):
        assert generator.snapshot() == GeneratedIdentities()


class TestEntropyFailure:
    """Test entropy source failures."""

    def test_unavailable_entropy_raises(self):
        def broken(length):
            raise NotImplementedError("no randomness source")

        generator = IdentityGenerator(entropy=broken)
        with pytest.raises(IdentityGenerationError, match="Entropy source unavailable"):
            generator.generate_suffix()

    def test_short_read_raises(self):
        generator = IdentityGenerator(entropy=lambda length: b"\x00")
        with pytest.raises(IdentityGenerationError, match="expected 4"):
            generator.generate_suffix()
