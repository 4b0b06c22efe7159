# ballot_ledger/elections/catalog.py

import logging
import uuid
from datetime import timedelta

from ballot_ledger.authentication.rbac import Permission, require_permission
from ballot_ledger.database.models import CandidateRow, ElectionRow
from ballot_ledger.domain import AuditAction, Candidate, CandidateSpec, Election, utcnow
from ballot_ledger.errors import InvalidInput, NotFound
from ballot_ledger.security.input_validator import InputValidator

# Election definitions. Published elections are never updated or deleted;
# an amendment is a new election.

logger = logging.getLogger(__name__)

MIN_CANDIDATES = 2
DEFAULT_WINDOW = timedelta(days=7)


def _to_election(row, candidate_rows):
    return Election(
        id=row.id,
        title=row.title,
        description=row.description,
        start_date=row.start_date,
        end_date=row.end_date,
        is_active=row.is_active,
        candidates=tuple(
            Candidate(
                id=cand.id,
                name=cand.name,
                party=cand.party,
                manifesto=cand.manifesto,
                image_url=cand.image_url,
            )
            for cand in candidate_rows
        ),
    )


def _candidate_rows(session, election_ids):
    grouped = {election_id: [] for election_id in election_ids}
    if not grouped:
        return grouped
    rows = (
        session.query(CandidateRow)
        .filter(CandidateRow.election_id.in_(list(grouped)))
        .order_by(CandidateRow.election_id, CandidateRow.position)
    )
    for row in rows:
        grouped[row.election_id].append(row)
    return grouped


class ElectionCatalog:
    def __init__(self, storage, audit_log, validator=None, default_window=DEFAULT_WINDOW):
        self.storage = storage
        self.audit_log = audit_log
        self.validator = validator or InputValidator()
        self.default_window = default_window

    def _clean_candidate(self, spec):
        if isinstance(spec, dict):
            try:
                spec = CandidateSpec(**spec)
            except TypeError as e:
                raise InvalidInput(f"Malformed candidate definition: {e}") from e
        elif not isinstance(spec, CandidateSpec):
            raise InvalidInput("Candidates must be CandidateSpec values or mappings")
        name = self.validator.clean_text(spec.name, max_length=120)
        party = self.validator.clean_text(spec.party, max_length=120)
        if not name or not party:
            raise InvalidInput("Every candidate needs a name and a party")
        manifesto = self.validator.clean_text(spec.manifesto, max_length=5000)
        image_url = spec.image_url or None
        if image_url is not None and not self.validator.validate_image_url(image_url):
            raise InvalidInput(f"Invalid image reference for candidate {name}")
        return CandidateSpec(name=name, party=party, manifesto=manifesto, image_url=image_url)

    @require_permission(Permission.CREATE_ELECTIONS)
    def create(self, title, description, candidates, *, actor, origin=None):
        try:
            candidates = list(candidates or [])
        except TypeError as e:
            raise InvalidInput("Candidates must be a list") from e
        if len(candidates) < MIN_CANDIDATES:
            raise InvalidInput(f"An election needs at least {MIN_CANDIDATES} candidates")
        clean_title = self.validator.clean_text(title, max_length=200)
        if not clean_title:
            raise InvalidInput("Election title is required")
        clean_description = self.validator.clean_text(description, max_length=5000)
        specs = [self._clean_candidate(spec) for spec in candidates]

        start = utcnow()
        election_id = f"elec-{uuid.uuid4().hex}"
        with self.storage.write() as session:
            row = ElectionRow(
                id=election_id,
                title=clean_title,
                description=clean_description,
                start_date=start,
                end_date=start + self.default_window,
                is_active=True,
            )
            session.add(row)
            candidate_rows = []
            for position, spec in enumerate(specs):
                cand = CandidateRow(
                    id=f"cand-{uuid.uuid4().hex}",
                    election_id=election_id,
                    position=position,
                    name=spec.name,
                    party=spec.party,
                    manifesto=spec.manifesto,
                    image_url=spec.image_url,
                )
                session.add(cand)
                candidate_rows.append(cand)
            session.flush()
            self.audit_log.append(
                AuditAction.ELECTION_CREATED,
                actor,
                f"Created election: {clean_title}",
                origin=origin,
                session=session,
            )
            election = _to_election(row, candidate_rows)

        logger.info("Election %s created with %d candidates", election.id, len(election.candidates))
        return election

    def list_active(self):
        # `is_active` is set at creation; the end date is informational only
        with self.storage.read() as session:
            rows = session.query(ElectionRow).filter_by(is_active=True).order_by(ElectionRow.seq).all()
            grouped = _candidate_rows(session, [row.id for row in rows])
            return [_to_election(row, grouped[row.id]) for row in rows]

    def get(self, election_id):
        with self.storage.read() as session:
            row = session.query(ElectionRow).filter_by(id=election_id).first()
            if row is None:
                raise NotFound(f"Election {election_id} not found")
            grouped = _candidate_rows(session, [row.id])
            return _to_election(row, grouped[row.id])

    def get_candidate(self, election_id, candidate_id):
        election = self.get(election_id)
        candidate = election.candidate(candidate_id)
        if candidate is None:
            raise NotFound(f"Candidate {candidate_id} not found in election {election_id}")
        return candidate
