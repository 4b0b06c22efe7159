# ballot_ledger/audit/audit_logger.py

import json
import hashlib
import base64
import logging
import uuid
from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey

from ballot_ledger.database.models import AuditEntryRow, AuditKeyRow
from ballot_ledger.domain import AuditAction, AuditEntry, utcnow

# Append-only audit log with hash chaining and Ed25519 signatures.
# The log stores whatever `details` it is given; VOTE_CAST callers must never
# pass the chosen candidate.

logger = logging.getLogger(__name__)

STORED_KEY_NAME = 'audit-signing'


def _to_entry(row):
    return AuditEntry(
        id=row.id,
        action=AuditAction(row.action),
        actor_id=row.actor_id,
        actor_name=row.actor_name,
        details=row.details,
        timestamp=row.timestamp,
        ip_address=row.ip_address,
        previous_hash=row.previous_hash,
        hash=row.hash,
        signature=row.signature,
    )


def _canonical(row_fields):
    return json.dumps(row_fields, sort_keys=True).encode()


def _key_from_seed(seed_hex):
    return Ed25519PrivateKey.from_private_bytes(bytes.fromhex(seed_hex))


def _new_seed():
    return Ed25519PrivateKey.generate().private_bytes(
        encoding=serialization.Encoding.Raw,
        format=serialization.PrivateFormat.Raw,
        encryption_algorithm=serialization.NoEncryption(),
    ).hex()


class AuditLog:
    def __init__(self, storage, signing_key=None):
        """
        `signing_key` is an Ed25519 private key or its hex seed. Without one the
        log signs with a key kept in the `audit_keys` table, created on first
        use, so every process sharing the database verifies the same chain.
        """
        self.storage = storage
        if isinstance(signing_key, str):
            signing_key = _key_from_seed(signing_key)
        self._signing_key = signing_key

    def _stored_key(self, session, create=False):
        if self._signing_key is not None:
            return self._signing_key
        row = session.get(AuditKeyRow, STORED_KEY_NAME)
        if row is None:
            if not create:
                return None
            row = AuditKeyRow(name=STORED_KEY_NAME, seed=_new_seed(), created_at=utcnow())
            session.add(row)
            session.flush()
            logger.info("Generated audit signing key")
            # Not cached until a later session reads it back committed
            return _key_from_seed(row.seed)
        self._signing_key = _key_from_seed(row.seed)
        return self._signing_key

    def ensure_signing_key(self):
        with self.storage.write() as session:
            self._stored_key(session, create=True)

    def append(self, action, actor, details, origin=None, session=None):
        """
        Append one entry. With `session` the entry joins the caller's open write
        transaction; otherwise it is written in a transaction of its own.
        """
        if session is None:
            with self.storage.write() as own_session:
                return self.append(action, actor, details, origin=origin, session=own_session)

        action = AuditAction(action)
        now = utcnow()
        last = session.query(AuditEntryRow).order_by(AuditEntryRow.seq.desc()).first()
        fields = {
            "id": f"log-{uuid.uuid4().hex}",
            "action": action.value,
            "actor_id": actor.id,
            "actor_name": actor.name,
            "details": details,
            "timestamp": now.isoformat(),
            "ip_address": origin,
            "previous_hash": last.hash if last else None,
        }
        payload = _canonical(fields)
        entry_hash = hashlib.sha256(payload).hexdigest()
        signing_key = self._stored_key(session, create=True)
        signature = base64.b64encode(signing_key.sign(payload)).decode()

        row = AuditEntryRow(
            id=fields["id"],
            action=fields["action"],
            actor_id=fields["actor_id"],
            actor_name=fields["actor_name"],
            details=details,
            timestamp=now,
            ip_address=origin,
            previous_hash=fields["previous_hash"],
            hash=entry_hash,
            signature=signature,
        )
        session.add(row)
        session.flush()
        logger.info("Audit %s by %s", action.value, actor.id)
        return _to_entry(row)

    def list(self, limit=None):
        with self.storage.read() as session:
            query = session.query(AuditEntryRow).order_by(AuditEntryRow.seq.desc())
            if limit is not None:
                query = query.limit(limit)
            return [_to_entry(row) for row in query]

    def verify_integrity(self):
        previous_hash = None
        with self.storage.read() as session:
            signing_key = self._stored_key(session)
            for row in session.query(AuditEntryRow).order_by(AuditEntryRow.seq.asc()):
                if signing_key is None:
                    logger.warning("Audit entries present but no signing key is stored")
                    return False
                if row.previous_hash != previous_hash:
                    logger.warning("Audit chain broken at %s", row.id)
                    return False
                payload = _canonical({
                    "id": row.id,
                    "action": row.action,
                    "actor_id": row.actor_id,
                    "actor_name": row.actor_name,
                    "details": row.details,
                    "timestamp": row.timestamp.isoformat(),
                    "ip_address": row.ip_address,
                    "previous_hash": row.previous_hash,
                })
                if hashlib.sha256(payload).hexdigest() != row.hash:
                    logger.warning("Audit hash mismatch at %s", row.id)
                    return False
                try:
                    signing_key.public_key().verify(base64.b64decode(row.signature), payload)
                except InvalidSignature:
                    logger.warning("Audit signature invalid at %s", row.id)
                    return False
                previous_hash = row.hash
        return True
