# ballot_ledger/cli.py

# Maintenance commands: `flask --app ballot_ledger ledger <command>`

import click
from flask import current_app
from flask.cli import AppGroup

from ballot_ledger.domain import AccountStatus, AuditAction, CandidateSpec, Constituency, Role, SYSTEM_ACTOR
from ballot_ledger.errors import Conflict

ledger_cli = AppGroup('ledger', help='Ballot ledger maintenance.')

DEMO_CONSTITUENCIES = [
    Constituency(id='con-1', name='Downtown Metro', region='Urban Central', total_registered=1500),
    Constituency(id='con-2', name='Westside Suburbs', region='Western District', total_registered=800),
    Constituency(id='con-3', name='North Hills', region='Northern Highlands', total_registered=450),
]

DEMO_ELECTION = {
    'title': 'National Council Representative 2025',
    'description': 'Electing the representative for the National Council to oversee urban development.',
    'candidates': [
        CandidateSpec(
            name='Sarah Jenkins', party='Progressive Alliance',
            manifesto='Focusing on green energy and accessible public transport for all citizens.',
            image_url='https://picsum.photos/200/200?random=1',
        ),
        CandidateSpec(
            name='Marcus Thorne', party='Traditional Union',
            manifesto='Strengthening economic policies and traditional educational values.',
            image_url='https://picsum.photos/200/200?random=2',
        ),
        CandidateSpec(
            name='Elena Rodriguez', party='Community First',
            manifesto='Grassroots movements, local parks, and increased funding for community arts.',
            image_url='https://picsum.photos/200/200?random=3',
        ),
    ],
}


def _core():
    return current_app.extensions['ballot_ledger']


def _find_record(core, email):
    for record in core.roll.list_all():
        if record.email == email.strip().lower():
            return record
    return None


def _register_once(core, name, email, role, password):
    try:
        return core.roll.register(name, email, role, password), True
    except Conflict:
        return _find_record(core, email), False


@ledger_cli.command('init-db')
def init_db():
    """Create any missing ledger tables and the stored audit signing key."""
    core = _core()
    core.storage.create_all()
    core.audit_log.ensure_signing_key()
    click.echo("Ledger tables ready.")


@ledger_cli.command('seed-demo')
@click.option('--admin-email', default='admin@vote.com', show_default=True)
@click.option('--admin-password', default='Admin@1234', show_default=True)
@click.option('--voter-email', default='jane@demo.com', show_default=True)
@click.option('--voter-password', default='User@1234', show_default=True)
def seed_demo(admin_email, admin_password, voter_email, voter_password):
    """
    Provision constituencies, an official, a demo voter and a demo election.

    Each step is skipped when its data already exists, so a run that failed
    part way is completed by the next one.
    """
    core = _core()
    if any(election.title == DEMO_ELECTION['title'] for election in core.catalog.list_active()):
        click.echo("Demo data already present; nothing else to do.")
        return

    created = core.roll.provision_constituencies(DEMO_CONSTITUENCIES)
    click.echo(f"Constituencies provisioned: {len(created)}")

    admin, is_new = _register_once(core, 'System Administrator', admin_email, Role.OFFICIAL, admin_password)
    if is_new:
        core.audit_log.append(AuditAction.SYSTEM_INIT, SYSTEM_ACTOR, 'Demo data provisioned')
        click.echo(f"Official created: {admin.email}")
    elif admin.role != Role.OFFICIAL:
        raise click.ClickException(f"{admin_email} is registered but is not an official.")

    voter, _ = _register_once(core, 'Jane Citizen', voter_email, Role.VOTER, voter_password)
    if voter.status == AccountStatus.PENDING:
        voter = core.roll.set_status(voter.id, AccountStatus.APPROVED, actor=admin)
    click.echo(f"Voter ready: {voter.email} ({voter.voter_id})")

    election = core.catalog.create(
        DEMO_ELECTION['title'], DEMO_ELECTION['description'], DEMO_ELECTION['candidates'], actor=admin,
    )
    click.echo(f"Election created: {election.id}")


@ledger_cli.command('verify-audit')
def verify_audit():
    """Check the audit log's hash chain and signatures."""
    if _core().audit_log.verify_integrity():
        click.echo("Audit log intact.")
        return
    raise click.ClickException("Audit log integrity check failed.")
