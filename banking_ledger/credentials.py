"""
Credential Hashing Module

Pluggable one-way password digests. Plaintext passwords are never stored;
accounts keep only the encoded digest produced here.

Hash comparison ignores case on the textual digest by default, matching the
behavior of earlier ledger versions. Set case_insensitive=False for an
exact comparison.
"""

from abc import ABC, abstractmethod
import hashlib
import hmac
import secrets

from .config import LedgerConfig


def digests_match(expected: str, actual: str, case_insensitive: bool = True) -> bool:
    """Constant-time comparison of two textual digests"""
    if case_insensitive:
        expected = expected.lower()
        actual = actual.lower()
    return hmac.compare_digest(expected.encode(), actual.encode())


class CredentialHasher(ABC):
    """Abstract interface for password hashing schemes"""

    name: str = ""

    def __init__(self, case_insensitive: bool = True):
        self.case_insensitive = case_insensitive

    @abstractmethod
    def hash(self, password: str) -> str:
        """Return the encoded digest of a plaintext password"""
        pass

    @abstractmethod
    def verify(self, password: str, credential_hash: str) -> bool:
        """Check a plaintext password against an encoded digest"""
        pass


class ScryptHasher(CredentialHasher):
    """
    Salted scrypt digests encoded as scrypt$n$r$p$salt$digest

    Cost parameters travel with each digest so a hash stays verifiable
    after the configured cost changes.
    """

    name = "scrypt"

    def __init__(self, n: int = 16384, r: int = 8, p: int = 1,
                 salt_bytes: int = 16, case_insensitive: bool = True):
        super().__init__(case_insensitive)
        self.n = n
        self.r = r
        self.p = p
        self.salt_bytes = salt_bytes

    def _generate_salt(self) -> str:
        """Generate random salt for password hashing"""
        return secrets.token_hex(self.salt_bytes)

    def _digest(self, password: str, salt: str, n: int, r: int, p: int) -> str:
        # OpenSSL needs headroom above the 128 * n * r bytes scrypt uses
        maxmem = 128 * n * r * 2 + 128 * r * p
        return hashlib.scrypt(
            password.encode(),
            salt=bytes.fromhex(salt),
            n=n, r=r, p=p,
            maxmem=maxmem
        ).hex()

    def hash(self, password: str) -> str:
        salt = self._generate_salt()
        digest = self._digest(password, salt, self.n, self.r, self.p)
        return f"{self.name}${self.n}${self.r}${self.p}${salt}${digest}"

    def verify(self, password: str, credential_hash: str) -> bool:
        parts = credential_hash.split("$")
        if len(parts) != 6 or parts[0].lower() != self.name:
            return False
        _, n, r, p, salt, _digest = parts
        try:
            n, r, p = int(n), int(r), int(p)
            digest = self._digest(password, salt, n, r, p)
        except ValueError:
            # Non-numeric cost, bad hex salt or parameters scrypt refuses
            return False
        candidate = f"{self.name}${n}${r}${p}${salt}${digest}"
        return digests_match(credential_hash, candidate, self.case_insensitive)


class Sha256Hasher(CredentialHasher):
    """
    Fast unsalted SHA-256 digests encoded as sha256$digest

    For tests and demos only.
    """

    name = "sha256"

    def hash(self, password: str) -> str:
        return f"{self.name}${hashlib.sha256(password.encode()).hexdigest()}"

    def verify(self, password: str, credential_hash: str) -> bool:
        return digests_match(credential_hash, self.hash(password), self.case_insensitive)


def hasher_from_config(config: LedgerConfig) -> CredentialHasher:
    """Build the configured credential hasher"""
    scheme = config.password_hasher.lower()
    if scheme == ScryptHasher.name:
        return ScryptHasher(
            n=config.scrypt_n,
            r=config.scrypt_r,
            p=config.scrypt_p,
            salt_bytes=config.salt_bytes,
            case_insensitive=config.case_insensitive_hash_compare
        )
    if scheme == Sha256Hasher.name:
        return Sha256Hasher(case_insensitive=config.case_insensitive_hash_compare)
    raise ValueError(f"Unknown password hasher: {config.password_hasher}")
