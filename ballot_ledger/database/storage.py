# ballot_ledger/database/storage.py

import logging
import threading
from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from ballot_ledger import db

logger = logging.getLogger(__name__)


class Storage:
    """
    Database handle shared by the stores.

    Writes are serialized through a single writer lock and run inside one
    transaction, so a state change and its audit entry commit together or not
    at all. Reads open their own session and take no lock unless the engine is
    an in-memory SQLite database, where every session shares one connection.
    """

    def __init__(self, engine):
        self.engine = engine
        self._sessions = sessionmaker(bind=engine, expire_on_commit=False)
        self._write_lock = threading.RLock()
        self._shared_connection = (
            engine.dialect.name == 'sqlite' and engine.url.database in (None, '', ':memory:')
        )

    @classmethod
    def from_url(cls, url, **engine_options):
        if url.startswith('sqlite'):
            connect_args = engine_options.setdefault('connect_args', {})
            connect_args.setdefault('check_same_thread', False)
            if url in ('sqlite://', 'sqlite:///:memory:'):
                engine_options.setdefault('poolclass', StaticPool)
        return cls(create_engine(url, **engine_options))

    def create_all(self):
        db.metadata.create_all(self.engine)
        logger.info("Ledger tables ensured on %s", self.engine.url.render_as_string(hide_password=True))

    def drop_all(self):
        db.metadata.drop_all(self.engine)

    @contextmanager
    def write(self):
        with self._write_lock:
            session = self._sessions()
            try:
                yield session
                session.commit()
            except Exception:
                session.rollback()
                raise
            finally:
                session.close()

    @contextmanager
    def read(self):
        if self._shared_connection:
            with self._write_lock:
                session = self._sessions()
                try:
                    yield session
                finally:
                    session.close()
            return
        session = self._sessions()
        try:
            yield session
        finally:
            session.close()
