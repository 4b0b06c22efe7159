# ballot_ledger/core.py

from dataclasses import dataclass

from ballot_ledger.advisory.summary_service import SummaryService
from ballot_ledger.audit.audit_logger import AuditLog
from ballot_ledger.config import Config
from ballot_ledger.elections.catalog import ElectionCatalog
from ballot_ledger.encryption.password_hashing import PasswordHashingService
from ballot_ledger.results.tally import TallyEngine
from ballot_ledger.roll.roll_store import RollStore
from ballot_ledger.security.input_validator import InputValidator
from ballot_ledger.voting.ledger import BallotLedger


@dataclass
class VotingCore:
    """The stores wired around one storage handle. Pass it around; never import it."""
    storage: object
    audit_log: AuditLog
    roll: RollStore
    catalog: ElectionCatalog
    ledger: BallotLedger
    tally: TallyEngine
    advisory: SummaryService


def _settings(config):
    defaults = {key: getattr(Config, key) for key in dir(Config) if key.isupper()}
    if config:
        defaults.update(config)
    return defaults


def build_core(storage, config=None):
    settings = _settings(config)
    validator = InputValidator()
    audit_log = AuditLog(storage, signing_key=settings.get('AUDIT_SIGNING_KEY'))
    roll = RollStore(storage, audit_log, PasswordHashingService.from_config(settings), validator=validator)
    catalog = ElectionCatalog(
        storage, audit_log, validator=validator, default_window=settings['ELECTION_DEFAULT_WINDOW'],
    )
    ledger = BallotLedger(storage, audit_log, require_approved=settings['LEDGER_REQUIRE_APPROVED_VOTER'])
    return VotingCore(
        storage=storage,
        audit_log=audit_log,
        roll=roll,
        catalog=catalog,
        ledger=ledger,
        tally=TallyEngine(ledger, catalog, roll),
        advisory=SummaryService.from_config(settings),
    )
