# ballot_ledger/encryption/password_hashing.py

import re
from argon2 import PasswordHasher
from argon2.exceptions import VerifyMismatchError, VerificationError, InvalidHashError, HashingError

from ballot_ledger.errors import InvalidInput

# Credential hashing and verification using Argon2id


class PasswordHashingService:
    def __init__(self, min_length=8, time_cost=3, memory_cost=65536, parallelism=4):
        self.min_length = min_length
        self.ph = PasswordHasher(
            time_cost=time_cost,
            memory_cost=memory_cost,
            parallelism=parallelism,
            hash_len=32,
            salt_len=16,
        )
        # Verified against when an email is unknown so both paths cost the same
        self._dummy_hash = self.ph.hash("unknown-account-placeholder")

    @classmethod
    def from_config(cls, config):
        return cls(
            min_length=config.get('PASSWORD_MIN_LENGTH', 8),
            time_cost=config.get('ARGON2_TIME_COST', 3),
            memory_cost=config.get('ARGON2_MEMORY_COST', 65536),
            parallelism=config.get('ARGON2_PARALLELISM', 4),
        )

    def hash_password(self, password: str) -> str:
        if not self.is_strong_password(password):
            raise InvalidInput("Password does not meet security requirements")
        try:
            return self.ph.hash(password)
        except HashingError as e:
            raise InvalidInput(f"Password hashing failed: {str(e)}")

    def rehash(self, password: str) -> str:
        # No policy check: the credential was accepted when first stored
        return self.ph.hash(password)

    def verify_password(self, password: str, hash_value: str) -> bool:
        try:
            return self.ph.verify(hash_value, password)
        except (VerifyMismatchError, VerificationError, InvalidHashError):
            return False

    def burn_verification(self, password: str) -> None:
        self.verify_password(password if isinstance(password, str) else "", self._dummy_hash)

    def needs_rehash(self, hash_value: str) -> bool:
        return self.ph.check_needs_rehash(hash_value)

    def is_strong_password(self, password: str) -> bool:
        if not isinstance(password, str) or len(password) < self.min_length:
            return False
        has_upper = bool(re.search(r'[A-Z]', password))
        has_lower = bool(re.search(r'[a-z]', password))
        has_digit = bool(re.search(r'\d', password))
        has_special = bool(re.search(r'[!@#$%^&*._-]', password))
        return all([has_upper, has_lower, has_digit, has_special])
