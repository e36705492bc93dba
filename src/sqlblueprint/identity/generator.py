"""Generate the random instance-name suffix and fallback user secrets."""

import os
from typing import Callable, Dict, Optional
from ..contracts.descriptors import GeneratedIdentities
from ..utils.errors import IdentityGenerationError
from ..utils.logging import get_logger

logger = get_logger("identity.generator")

SUFFIX_BYTES = 4
SECRET_BYTES = 8


class IdentityGenerator:
    """
    Produces hex identifiers once per resolution pass.

    Values are memoized on the instance, so every descriptor built in the same
    pass sees the same suffix and the same secret. Values from an earlier pass
    can be seeded through ``previous``; the suffix is always reused, the
    fallback secret only while it is keyed by the same instance name.
    """

    def __init__(
        self,
        entropy: Callable[[int], bytes] = os.urandom,
        previous: Optional[GeneratedIdentities] = None,
        suffix_bytes: int = SUFFIX_BYTES,
        secret_bytes: int = SECRET_BYTES,
    ):
        self._entropy = entropy
        self._suffix_bytes = suffix_bytes
        self._secret_bytes = secret_bytes
        self._suffix: Optional[str] = None
        self._secrets: Dict[str, str] = {}
        self._last_keeper: Optional[str] = None
        self._previous = previous

        if previous is not None:
            self._suffix = previous.suffix
            if previous.fallback_secret and previous.fallback_secret_keeper:
                self._secrets[previous.fallback_secret_keeper] = previous.fallback_secret

    def _token(self, byte_length: int) -> str:
        try:
            raw = self._entropy(byte_length)
        except (OSError, NotImplementedError) as e:
            raise IdentityGenerationError(f"Entropy source unavailable: {e}") from e

        if len(raw) != byte_length:
            raise IdentityGenerationError(
                f"Entropy source returned {len(raw)} bytes, expected {byte_length}"
            )
        return raw.hex()

    def generate_suffix(self) -> str:
        """Return the instance-name suffix (4-byte hex), generating it on first use."""
        if self._suffix is None:
            self._suffix = self._token(self._suffix_bytes)
            logger.debug(f"Generated instance name suffix: {self._suffix}")
        return self._suffix

    def generate_fallback_secret(self, keyed_by: str) -> str:
        """Return the fallback password (8-byte hex) for the given instance name."""
        if keyed_by not in self._secrets:
            self._secrets[keyed_by] = self._token(self._secret_bytes)
            logger.info(f"Generated fallback secret for instance {keyed_by}")
        self._last_keeper = keyed_by
        return self._secrets[keyed_by]

    def snapshot(self) -> GeneratedIdentities:
        """Generated values to persist for the next pass."""
        if self._last_keeper is None:
            previous = self._previous or GeneratedIdentities()
            return GeneratedIdentities(
                suffix=self._suffix,
                fallback_secret=previous.fallback_secret,
                fallback_secret_keeper=previous.fallback_secret_keeper,
            )
        secret = self._secrets[self._last_keeper]
        return GeneratedIdentities(
            suffix=self._suffix,
            fallback_secret=secret,
            fallback_secret_keeper=self._last_keeper,
        )
