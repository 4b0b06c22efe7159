# ballot_ledger/domain.py

# Immutable values handed across the store boundary. ORM rows never leave a session.

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Tuple


class Role(str, Enum):
    VOTER = "VOTER"
    OFFICIAL = "OFFICIAL"


class AccountStatus(str, Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class AuditAction(str, Enum):
    LOGIN = "LOGIN"
    VOTE_CAST = "VOTE_CAST"
    USER_APPROVED = "USER_APPROVED"
    USER_REJECTED = "USER_REJECTED"
    ELECTION_CREATED = "ELECTION_CREATED"
    SYSTEM_INIT = "SYSTEM_INIT"


def utcnow() -> datetime:
    # Stored naive; every timestamp in the database is UTC
    return datetime.now(timezone.utc).replace(tzinfo=None)


@dataclass(frozen=True)
class Actor:
    id: str
    name: str
    role: Role


SYSTEM_ACTOR = Actor(id='system', name='System', role=Role.OFFICIAL)


@dataclass(frozen=True)
class Record:
    id: str
    name: str
    email: str
    role: Role
    status: AccountStatus
    voter_id: Optional[str] = None
    constituency_id: Optional[str] = None
    created_at: Optional[datetime] = None

    @property
    def is_approved(self) -> bool:
        return self.status == AccountStatus.APPROVED


@dataclass(frozen=True)
class Constituency:
    id: str
    name: str
    region: str
    total_registered: int = 0


@dataclass(frozen=True)
class CandidateSpec:
    """Candidate fields supplied by an official before ids are assigned."""
    name: str
    party: str
    manifesto: str = ''
    image_url: Optional[str] = None


@dataclass(frozen=True)
class Candidate:
    id: str
    name: str
    party: str
    manifesto: str = ''
    image_url: Optional[str] = None


@dataclass(frozen=True)
class Election:
    id: str
    title: str
    description: str
    start_date: datetime
    end_date: datetime
    candidates: Tuple[Candidate, ...] = field(default_factory=tuple)
    is_active: bool = True

    def candidate(self, candidate_id: str) -> Optional[Candidate]:
        for cand in self.candidates:
            if cand.id == candidate_id:
                return cand
        return None


@dataclass(frozen=True)
class Vote:
    id: str
    election_id: str
    voter_id: str
    candidate_id: str
    constituency_id: str
    timestamp: datetime


@dataclass(frozen=True)
class AuditEntry:
    id: str
    action: AuditAction
    actor_id: str
    actor_name: str
    details: str
    timestamp: datetime
    ip_address: Optional[str] = None
    previous_hash: Optional[str] = None
    hash: Optional[str] = None
    signature: Optional[str] = None
