import pytest

from ballot_ledger.cli import DEMO_CONSTITUENCIES
from ballot_ledger.core import build_core
from ballot_ledger.database.storage import Storage
from ballot_ledger.domain import CandidateSpec, Role

# Cheap argon2 parameters keep registration fast in tests
FAST_CONFIG = {
    'ARGON2_TIME_COST': 1,
    'ARGON2_MEMORY_COST': 1024,
    'ARGON2_PARALLELISM': 1,
    'ADVISORY_API_KEY': '',
}

VOTER_PASSWORD = "User@1234"
ADMIN_PASSWORD = "Admin@1234"


@pytest.fixture
def storage(tmp_path):
    """File-backed SQLite so threads get their own connections."""
    store = Storage.from_url(f"sqlite:///{tmp_path / 'ledger.sqlite'}")
    store.create_all()
    yield store
    store.engine.dispose()


@pytest.fixture
def core(storage):
    return build_core(storage, FAST_CONFIG)


@pytest.fixture
def constituencies(core):
    core.roll.provision_constituencies(DEMO_CONSTITUENCIES)
    return DEMO_CONSTITUENCIES


@pytest.fixture
def official(core):
    return core.roll.register('System Administrator', 'admin@vote.com', Role.OFFICIAL, ADMIN_PASSWORD)


@pytest.fixture
def make_voter(core, constituencies, official):
    counter = {'n': 0}

    def _make(name=None, approve=True):
        counter['n'] += 1
        n = counter['n']
        record = core.roll.register(name or f'Voter {n}', f'voter{n}@demo.com', Role.VOTER, VOTER_PASSWORD)
        if approve:
            record = core.roll.set_status(record.id, 'APPROVED', actor=official)
        return record

    return _make


@pytest.fixture
def election(core, official):
    return core.catalog.create(
        'National Council Representative 2025',
        'Electing the representative for the National Council to oversee urban development.',
        [
            CandidateSpec(name='Sarah Jenkins', party='Progressive Alliance', manifesto='Green energy.'),
            CandidateSpec(name='Marcus Thorne', party='Traditional Union', manifesto='Economic policy.'),
            CandidateSpec(name='Elena Rodriguez', party='Community First', manifesto='Local parks.'),
        ],
        actor=official,
    )
