# ballot_ledger/roll/roll_store.py

import logging
import secrets
import uuid

from ballot_ledger.authentication.rbac import Permission, require_permission
from ballot_ledger.database.models import ConstituencyRow, RecordRow
from ballot_ledger.domain import AccountStatus, AuditAction, Constituency, Record, Role, utcnow
from ballot_ledger.errors import Conflict, InvalidInput, NotFound
from ballot_ledger.security.input_validator import InputValidator

# Voter and official identity records plus constituency reference data

logger = logging.getLogger(__name__)

_TRANSITIONS = {
    AccountStatus.PENDING: {AccountStatus.APPROVED, AccountStatus.REJECTED},
}

_STATUS_ACTIONS = {
    AccountStatus.APPROVED: AuditAction.USER_APPROVED,
    AccountStatus.REJECTED: AuditAction.USER_REJECTED,
}


def _to_record(row):
    return Record(
        id=row.id,
        name=row.name,
        email=row.email,
        role=Role(row.role),
        status=AccountStatus(row.status),
        voter_id=row.voter_id,
        constituency_id=row.constituency_id,
        created_at=row.created_at,
    )


def _to_constituency(row):
    return Constituency(id=row.id, name=row.name, region=row.region, total_registered=row.total_registered)


class RollStore:
    def __init__(self, storage, audit_log, password_service, validator=None, rng=None):
        self.storage = storage
        self.audit_log = audit_log
        self.passwords = password_service
        self.validator = validator or InputValidator()
        self._rng = rng or secrets.SystemRandom()

    # --- Constituencies ---

    def provision_constituencies(self, constituencies):
        """Create reference constituencies; ids already present are left untouched."""
        created = []
        with self.storage.write() as session:
            for con in constituencies:
                if session.get(ConstituencyRow, con.id) is not None:
                    continue
                session.add(ConstituencyRow(
                    id=con.id,
                    name=con.name,
                    region=con.region,
                    total_registered=con.total_registered,
                ))
                created.append(con)
        return created

    def list_constituencies(self):
        with self.storage.read() as session:
            rows = session.query(ConstituencyRow).order_by(ConstituencyRow.id).all()
            return [_to_constituency(row) for row in rows]

    def get_constituency(self, constituency_id):
        with self.storage.read() as session:
            row = session.get(ConstituencyRow, constituency_id)
            if row is None:
                raise NotFound(f"Constituency {constituency_id} not found")
            return _to_constituency(row)

    # --- Records ---

    def register(self, name, email, role, credential):
        try:
            role = Role(role)
        except ValueError as e:
            raise InvalidInput(f"Unknown role: {role}") from e
        clean_name = self.validator.clean_text(name, max_length=120)
        if not clean_name:
            raise InvalidInput("Name is required")
        normalized = self.validator.normalize_email(email)
        if normalized is None:
            raise InvalidInput("Invalid email address")
        password_hash = self.passwords.hash_password(credential)

        with self.storage.write() as session:
            if session.query(RecordRow).filter_by(email=normalized).first() is not None:
                raise Conflict('User already exists')

            now = utcnow()
            row = RecordRow(
                id=f"user-{uuid.uuid4().hex}",
                name=clean_name,
                email=normalized,
                role=role.value,
                password_hash=password_hash,
                created_at=now,
            )
            if role == Role.OFFICIAL:
                row.status = AccountStatus.APPROVED.value
            else:
                row.status = AccountStatus.PENDING.value
                row.voter_id = self._new_voter_id(session, now.year)
                row.constituency_id = self._pick_constituency(session)
            session.add(row)
            session.flush()
            record = _to_record(row)

        logger.info("Registered %s %s", record.role.value, record.id)
        return record

    def _new_voter_id(self, session, year):
        while True:
            candidate = f"VOT-{year}-{self._rng.randint(1000, 9999)}"
            if session.query(RecordRow.id).filter_by(voter_id=candidate).first() is None:
                return candidate

    def _pick_constituency(self, session):
        ids = [con_id for (con_id,) in session.query(ConstituencyRow.id).order_by(ConstituencyRow.id)]
        if not ids:
            return None
        return self._rng.choice(ids)

    def authenticate(self, email, credential, origin=None):
        normalized = self.validator.normalize_email(email)
        with self.storage.read() as session:
            row = None
            if normalized is not None:
                row = session.query(RecordRow).filter_by(email=normalized).first()
            if row is None:
                self.passwords.burn_verification(credential)
                return None
            password_hash = row.password_hash
            record = _to_record(row)

        if not isinstance(credential, str) or not self.passwords.verify_password(credential, password_hash):
            return None

        with self.storage.write() as session:
            # Hashes made under older cost parameters are upgraded on login
            if self.passwords.needs_rehash(password_hash):
                session.get(RecordRow, record.id).password_hash = self.passwords.rehash(credential)
            self.audit_log.append(
                AuditAction.LOGIN, record, 'User logged in successfully', origin=origin, session=session,
            )
        return record

    @require_permission(Permission.MANAGE_VOTERS)
    def set_status(self, record_id, new_status, *, actor, origin=None):
        try:
            new_status = AccountStatus(new_status)
        except ValueError as e:
            raise InvalidInput(f"Unknown account status: {new_status}") from e
        with self.storage.write() as session:
            row = session.get(RecordRow, record_id)
            if row is None:
                raise NotFound(f"User {record_id} not found")
            current = AccountStatus(row.status)
            if new_status not in _TRANSITIONS.get(current, set()):
                raise InvalidInput(f"Cannot move user from {current.value} to {new_status.value}")

            row.status = new_status.value
            session.flush()
            self.audit_log.append(
                _STATUS_ACTIONS[new_status],
                actor,
                f"Updated status of user {row.email} ({row.voter_id}) to {new_status.value}",
                origin=origin,
                session=session,
            )
            record = _to_record(row)

        logger.info("User %s is now %s", record.id, record.status.value)
        return record

    def reset_credential(self, email, new_credential):
        normalized = self.validator.normalize_email(email)
        password_hash = self.passwords.hash_password(new_credential)
        with self.storage.write() as session:
            row = None
            if normalized is not None:
                row = session.query(RecordRow).filter_by(email=normalized).first()
            if row is None:
                raise NotFound('User not found')
            row.password_hash = password_hash

    def get(self, record_id):
        with self.storage.read() as session:
            row = session.get(RecordRow, record_id)
            if row is None:
                raise NotFound(f"User {record_id} not found")
            return _to_record(row)

    def list_all(self):
        with self.storage.read() as session:
            rows = session.query(RecordRow).order_by(RecordRow.created_at, RecordRow.id).all()
            return [_to_record(row) for row in rows]

    def list_pending(self):
        return [rec for rec in self.list_all() if rec.status == AccountStatus.PENDING]

    def list_voters(self):
        return [rec for rec in self.list_all() if rec.role == Role.VOTER]
