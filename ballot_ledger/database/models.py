# ballot_ledger/database/models.py

from ballot_ledger import db

# One table per collection. Referential checks live in the stores, so there are
# no foreign keys here; the votes table keeps a unique (election, voter) pair.


class RecordRow(db.Model):
    __tablename__ = 'records'
    id = db.Column(db.String(64), primary_key=True)
    name = db.Column(db.String(120), nullable=False)
    email = db.Column(db.String(254), unique=True, nullable=False)
    role = db.Column(db.String(20), nullable=False)
    status = db.Column(db.String(20), nullable=False)
    voter_id = db.Column(db.String(20), unique=True, nullable=True)
    constituency_id = db.Column(db.String(64), nullable=True)
    password_hash = db.Column(db.String(200), nullable=False)
    created_at = db.Column(db.DateTime, nullable=False)


class ConstituencyRow(db.Model):
    __tablename__ = 'constituencies'
    id = db.Column(db.String(64), primary_key=True)
    name = db.Column(db.String(120), nullable=False)
    region = db.Column(db.String(120), nullable=False)
    total_registered = db.Column(db.Integer, nullable=False, default=0)


class ElectionRow(db.Model):
    __tablename__ = 'elections'
    seq = db.Column(db.Integer, primary_key=True, autoincrement=True)
    id = db.Column(db.String(64), unique=True, nullable=False)
    title = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, nullable=False, default='')
    start_date = db.Column(db.DateTime, nullable=False)
    end_date = db.Column(db.DateTime, nullable=False)
    is_active = db.Column(db.Boolean, nullable=False, default=True)


class CandidateRow(db.Model):
    __tablename__ = 'candidates'
    id = db.Column(db.String(64), primary_key=True)
    election_id = db.Column(db.String(64), nullable=False, index=True)
    position = db.Column(db.Integer, nullable=False)
    name = db.Column(db.String(120), nullable=False)
    party = db.Column(db.String(120), nullable=False)
    manifesto = db.Column(db.Text, nullable=False, default='')
    image_url = db.Column(db.String(500), nullable=True)


class VoteRow(db.Model):
    __tablename__ = 'votes'
    __table_args__ = (
        db.UniqueConstraint('election_id', 'voter_id', name='uq_votes_election_voter'),
    )
    id = db.Column(db.String(64), primary_key=True)
    election_id = db.Column(db.String(64), nullable=False, index=True)
    voter_id = db.Column(db.String(64), nullable=False)
    candidate_id = db.Column(db.String(64), nullable=False)
    constituency_id = db.Column(db.String(64), nullable=False)
    timestamp = db.Column(db.DateTime, nullable=False)

    def __repr__(self):
        return f'<Vote {self.id} in Election {self.election_id}>'


class AuditEntryRow(db.Model):
    __tablename__ = 'audit_entries'
    seq = db.Column(db.Integer, primary_key=True, autoincrement=True)
    id = db.Column(db.String(64), unique=True, nullable=False)
    action = db.Column(db.String(32), nullable=False)
    actor_id = db.Column(db.String(64), nullable=False)
    actor_name = db.Column(db.String(120), nullable=False)
    details = db.Column(db.Text, nullable=False)
    timestamp = db.Column(db.DateTime, nullable=False)
    ip_address = db.Column(db.String(64), nullable=True)
    previous_hash = db.Column(db.String(64), nullable=True)
    hash = db.Column(db.String(64), nullable=False)
    signature = db.Column(db.String(128), nullable=False)


class AuditKeyRow(db.Model):
    __tablename__ = 'audit_keys'
    name = db.Column(db.String(32), primary_key=True)
    seed = db.Column(db.String(64), nullable=False)
    created_at = db.Column(db.DateTime, nullable=False)
