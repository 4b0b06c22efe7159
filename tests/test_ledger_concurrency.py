import threading
from collections import Counter
from concurrent.futures import ThreadPoolExecutor

from ballot_ledger.domain import AuditAction
from ballot_ledger.errors import AlreadyVoted


def test_concurrent_casts_for_one_pair_yield_exactly_one_vote(core, election, make_voter):
    jane = make_voter('Jane Citizen')
    attempts = 24
    barrier = threading.Barrier(attempts)
    outcomes = []
    outcomes_lock = threading.Lock()

    def cast(i):
        candidate_id = election.candidates[i % len(election.candidates)].id
        barrier.wait()
        try:
            core.ledger.cast_vote(election.id, jane.id, candidate_id)
            result = 'ok'
        except AlreadyVoted:
            result = 'already'
        with outcomes_lock:
            outcomes.append(result)

    threads = [threading.Thread(target=cast, args=(i,)) for i in range(attempts)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert Counter(outcomes) == {'ok': 1, 'already': attempts - 1}
    assert core.ledger.count(election.id) == 1
    vote_entries = [e for e in core.audit_log.list() if e.action == AuditAction.VOTE_CAST]
    assert len(vote_entries) == 1
    assert core.audit_log.verify_integrity() is True


def test_fifty_concurrent_voters_match_known_distribution(core, election, make_voter):
    voters = [make_voter() for _ in range(50)]
    distribution = [25, 15, 10]
    choices = []
    for cand, n in zip(election.candidates, distribution):
        choices.extend([cand.id] * n)

    with ThreadPoolExecutor(max_workers=10) as pool:
        list(pool.map(
            lambda pair: core.ledger.cast_vote(election.id, pair[0].id, pair[1]),
            zip(voters, choices),
        ))

    tally = core.tally.candidate_tally(election.id)
    assert sum(tally.values()) == 50
    assert tally == {cand.id: n for cand, n in zip(election.candidates, distribution)}
    assert core.tally.party_tally(election.id) == {
        'Progressive Alliance': 25, 'Traditional Union': 15, 'Community First': 10,
    }
    assert sum(core.tally.constituency_turnout(election.id).values()) == 50


def test_tallies_read_while_votes_arrive_are_consistent(core, election, make_voter):
    voters = [make_voter() for _ in range(30)]
    candidate_id = election.candidates[0].id
    stop = threading.Event()
    observed = []

    def poll():
        while not stop.is_set():
            observed.append(sum(core.tally.candidate_tally(election.id).values()))

    poller = threading.Thread(target=poll)
    poller.start()
    try:
        with ThreadPoolExecutor(max_workers=6) as pool:
            list(pool.map(lambda v: core.ledger.cast_vote(election.id, v.id, candidate_id), voters))
    finally:
        stop.set()
        poller.join()

    assert all(0 <= total <= 30 for total in observed)
    assert observed == sorted(observed)
    assert core.tally.candidate_tally(election.id) == {candidate_id: 30}
