# ballot_ledger/config.py

import os
from datetime import timedelta


def _env_bool(name, default=False):
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY', 'change-me-in-production')

    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL', 'sqlite:///ballot_ledger.sqlite')
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Elections close this long after creation; the active flag itself is static
    ELECTION_DEFAULT_WINDOW = timedelta(days=int(os.environ.get('ELECTION_DEFAULT_WINDOW_DAYS', '7')))

    # Off by default: approval is enforced by the calling layer, not at cast time
    LEDGER_REQUIRE_APPROVED_VOTER = _env_bool('LEDGER_REQUIRE_APPROVED_VOTER')

    PASSWORD_MIN_LENGTH = int(os.environ.get('PASSWORD_MIN_LENGTH', '8'))
    ARGON2_TIME_COST = int(os.environ.get('ARGON2_TIME_COST', '3'))
    ARGON2_MEMORY_COST = int(os.environ.get('ARGON2_MEMORY_COST', '65536'))
    ARGON2_PARALLELISM = int(os.environ.get('ARGON2_PARALLELISM', '4'))

    # Hex-encoded 32 byte Ed25519 seed. A fresh key is generated when unset,
    # which means signatures only verify for the lifetime of the process.
    AUDIT_SIGNING_KEY = os.environ.get('AUDIT_SIGNING_KEY')

    ADVISORY_SERVICE_URL = os.environ.get('ADVISORY_SERVICE_URL', 'http://advisory:8090/v1/generate')
    ADVISORY_API_KEY = os.environ.get('ADVISORY_API_KEY', '')
    ADVISORY_TIMEOUT_S = float(os.environ.get('ADVISORY_TIMEOUT_S', '5'))


class TestingConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    ARGON2_TIME_COST = 1
    ARGON2_MEMORY_COST = 1024
    ARGON2_PARALLELISM = 1
    ADVISORY_API_KEY = ''
