# ballot_ledger/errors.py

# Typed failures raised synchronously to the immediate caller. Nothing here is retried.


class LedgerError(Exception):
    pass


class Conflict(LedgerError):
    """An email is already registered."""


class NotFound(LedgerError):
    """A record, election, candidate or constituency does not exist."""


class InvalidInput(LedgerError):
    """Malformed definition or an illegal transition."""


class AlreadyVoted(LedgerError):
    """A vote for this (election, voter) pair is already in the ledger."""

    def __init__(self, election_id, voter_id):
        super().__init__(f"Voter {voter_id} has already voted in election {election_id}")
        self.election_id = election_id
        self.voter_id = voter_id


class NotEligible(LedgerError):
    """The voter is not approved to cast ballots."""


class PermissionDenied(LedgerError):
    """The acting user's role lacks the required permission."""
