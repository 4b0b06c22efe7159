# ballot_ledger/voting/ledger.py

import logging
import threading
import uuid

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError

from ballot_ledger.database.models import CandidateRow, ElectionRow, RecordRow, VoteRow
from ballot_ledger.domain import AccountStatus, Actor, AuditAction, Role, Vote, utcnow
from ballot_ledger.errors import AlreadyVoted, InvalidInput, NotEligible, NotFound

# Append-only ballot ledger: one vote per (election, voter), never updated or deleted

logger = logging.getLogger(__name__)

UNKNOWN_CONSTITUENCY = 'unknown'


def _to_vote(row):
    return Vote(
        id=row.id,
        election_id=row.election_id,
        voter_id=row.voter_id,
        candidate_id=row.candidate_id,
        constituency_id=row.constituency_id,
        timestamp=row.timestamp,
    )


class BallotLedger:
    def __init__(self, storage, audit_log, require_approved=False):
        self.storage = storage
        self.audit_log = audit_log
        self.require_approved = require_approved
        self._locks_guard = threading.Lock()
        self._election_locks = {}

    def _lock_for(self, election_id):
        with self._locks_guard:
            lock = self._election_locks.get(election_id)
        if lock is not None:
            return lock
        # Locks exist only for elections that exist; elections are never deleted
        with self.storage.read() as session:
            if session.query(ElectionRow.id).filter_by(id=election_id).first() is None:
                raise NotFound(f"Election {election_id} not found")
        with self._locks_guard:
            return self._election_locks.setdefault(election_id, threading.Lock())

    def has_voted(self, election_id, voter_id):
        with self.storage.read() as session:
            found = (
                session.query(VoteRow.id)
                .filter_by(election_id=election_id, voter_id=voter_id)
                .first()
            )
            return found is not None

    def cast_vote(self, election_id, voter_id, candidate_id, origin=None):
        """
        Record a ballot and its VOTE_CAST audit entry in one transaction.

        The existence check and the insert run under the election's lock, so
        concurrent casts for the same voter produce exactly one vote and
        `AlreadyVoted` for every other attempt. The audit details name the
        election and constituency only.
        """
        try:
            with self._lock_for(election_id), self.storage.write() as session:
                voter = session.get(RecordRow, voter_id)
                if voter is None:
                    raise NotFound("Voter not found")
                if self.require_approved and voter.status != AccountStatus.APPROVED.value:
                    raise NotEligible(f"Voter {voter_id} is {voter.status}, not approved")

                in_election = (
                    session.query(CandidateRow.id)
                    .filter_by(id=candidate_id, election_id=election_id)
                    .first()
                )
                if in_election is None:
                    raise InvalidInput(f"Candidate is not standing in election {election_id}")

                existing = (
                    session.query(VoteRow.id)
                    .filter_by(election_id=election_id, voter_id=voter_id)
                    .first()
                )
                if existing is not None:
                    raise AlreadyVoted(election_id, voter_id)

                constituency_id = voter.constituency_id or UNKNOWN_CONSTITUENCY
                row = VoteRow(
                    id=f"vote-{uuid.uuid4().hex}",
                    election_id=election_id,
                    voter_id=voter_id,
                    candidate_id=candidate_id,
                    constituency_id=constituency_id,
                    timestamp=utcnow(),
                )
                session.add(row)
                session.flush()

                self.audit_log.append(
                    AuditAction.VOTE_CAST,
                    Actor(id=voter.id, name=voter.name, role=Role(voter.role)),
                    f"Voter cast a ballot in election {election_id} from constituency {constituency_id}",
                    origin=origin,
                    session=session,
                )
                vote = _to_vote(row)
        except IntegrityError:
            # Another process won the race for this pair
            logger.warning("Duplicate vote rejected by storage for election %s", election_id)
            raise AlreadyVoted(election_id, voter_id)
        except AlreadyVoted:
            logger.info("Duplicate vote attempt in election %s by %s", election_id, voter_id)
            raise

        logger.info("Vote %s recorded in election %s", vote.id, election_id)
        return vote

    def count(self, election_id):
        with self.storage.read() as session:
            return session.query(func.count(VoteRow.id)).filter_by(election_id=election_id).scalar()

    def votes_for(self, election_id):
        """Snapshot of every vote in an election, read in a single query."""
        with self.storage.read() as session:
            rows = session.query(VoteRow).filter_by(election_id=election_id).all()
            return [_to_vote(row) for row in rows]
