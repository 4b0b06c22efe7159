# ballot_ledger/results/tally.py

from collections import Counter
from dataclasses import dataclass
from typing import Dict, List

# Read-side aggregation. Every call recomputes from one ledger snapshot;
# nothing is cached between calls, so polling any number of times is safe.

UNKNOWN_BUCKET = 'Unknown'


@dataclass(frozen=True)
class CandidateResult:
    candidate_id: str
    name: str
    party: str
    votes: int


@dataclass(frozen=True)
class ElectionResults:
    election_id: str
    title: str
    total_votes: int
    candidates: List[CandidateResult]
    parties: Dict[str, int]
    constituencies: Dict[str, int]


class TallyEngine:
    def __init__(self, ledger, catalog, roll):
        self.ledger = ledger
        self.catalog = catalog
        self.roll = roll

    def _snapshot(self, election_id):
        # Raises NotFound for an unknown election rather than reporting an empty tally
        election = self.catalog.get(election_id)
        return election, self.ledger.votes_for(election_id)

    @staticmethod
    def _by_candidate(election, votes, include_zero):
        counts = Counter(vote.candidate_id for vote in votes)
        if include_zero:
            return {cand.id: counts.get(cand.id, 0) for cand in election.candidates}
        return dict(counts)

    @staticmethod
    def _by_party(election, votes):
        parties = {cand.id: cand.party for cand in election.candidates}
        counts = Counter()
        for vote in votes:
            party = parties.get(vote.candidate_id)
            if party is not None:
                counts[party] += 1
        return dict(counts)

    def _by_constituency(self, votes):
        names = {con.id: con.name for con in self.roll.list_constituencies()}
        counts = Counter(names.get(vote.constituency_id, UNKNOWN_BUCKET) for vote in votes)
        return dict(counts)

    def candidate_tally(self, election_id, include_zero=False):
        """
        Votes per candidate id. Candidates without votes are left out unless
        `include_zero` is set, in which case every declared candidate appears.
        """
        election, votes = self._snapshot(election_id)
        return self._by_candidate(election, votes, include_zero)

    def party_tally(self, election_id):
        election, votes = self._snapshot(election_id)
        return self._by_party(election, votes)

    def constituency_turnout(self, election_id):
        """Votes per constituency name; unresolved references count under "Unknown"."""
        _, votes = self._snapshot(election_id)
        return self._by_constituency(votes)

    def results(self, election_id):
        election, votes = self._snapshot(election_id)
        per_candidate = self._by_candidate(election, votes, include_zero=True)
        return ElectionResults(
            election_id=election.id,
            title=election.title,
            total_votes=len(votes),
            candidates=[
                CandidateResult(
                    candidate_id=cand.id,
                    name=cand.name,
                    party=cand.party,
                    votes=per_candidate[cand.id],
                )
                for cand in election.candidates
            ],
            parties=self._by_party(election, votes),
            constituencies=self._by_constituency(votes),
        )
