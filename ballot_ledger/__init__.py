# ballot_ledger/__init__.py

from flask import Flask
from flask_sqlalchemy import SQLAlchemy

# Declared before the model import below; models register on this metadata.
db = SQLAlchemy()


def create_app(config_object='ballot_ledger.config.Config', overrides=None):
    """Build the Flask host: configuration, database binding and the wired core."""
    from ballot_ledger.cli import ledger_cli
    from ballot_ledger.core import build_core
    from ballot_ledger.database.storage import Storage

    app = Flask(__name__)
    app.config.from_object(config_object)
    if overrides:
        app.config.update(overrides)

    db.init_app(app)

    with app.app_context():
        storage = Storage(db.engine)
        storage.create_all()
        app.extensions['ballot_ledger'] = build_core(storage, app.config)

    app.cli.add_command(ledger_cli)
    return app


def get_core(app):
    return app.extensions['ballot_ledger']


# Ensure model modules are imported so SQLAlchemy metadata is populated
from ballot_ledger.database import models  # noqa: E402,F401
