import pytest
import requests
from unittest.mock import patch

from ballot_ledger.advisory import summary_service as svc
from ballot_ledger.advisory.summary_service import SummaryService


@pytest.fixture
def service():
    return SummaryService(url='http://advisory.test/v1/generate', api_key='k-123', timeout_s=2)


def test_no_api_key_makes_no_request():
    service = SummaryService(url='http://advisory.test/v1/generate', api_key='')
    with patch("ballot_ledger.advisory.summary_service.requests.post") as mock_post:
        assert service.simple_summary("text") == svc.SUMMARY_NO_KEY
        assert service.manifesto_analysis("A", "B", "C") == svc.ANALYSIS_NO_KEY
    mock_post.assert_not_called()


def test_summary_returns_service_text(service):
    with patch("ballot_ledger.advisory.summary_service.requests.post") as mock_post:
        mock_post.return_value.status_code = 200
        mock_post.return_value.json.return_value = {"text": "  Pick a council member.  "}
        assert service.simple_summary("Electing the representative") == "Pick a council member."

    _, kwargs = mock_post.call_args
    assert kwargs["timeout"] == 2
    assert kwargs["headers"]["Authorization"] == "Bearer k-123"
    assert "Electing the representative" in kwargs["json"]["contents"]


def test_manifesto_analysis_prompt_names_candidate(service):
    with patch("ballot_ledger.advisory.summary_service.requests.post") as mock_post:
        mock_post.return_value.status_code = 200
        mock_post.return_value.json.return_value = {"text": "- Transport"}
        assert service.manifesto_analysis("Sarah Jenkins", "Progressive Alliance", "Green energy") == "- Transport"

    contents = mock_post.call_args.kwargs["json"]["contents"]
    assert "Sarah Jenkins" in contents and "Progressive Alliance" in contents


@pytest.mark.parametrize("exc", [requests.ConnectionError("down"), requests.Timeout("slow")])
def test_network_failure_falls_back(service, exc):
    with patch("ballot_ledger.advisory.summary_service.requests.post", side_effect=exc):
        assert service.simple_summary("text") == svc.SUMMARY_OFFLINE
        assert service.manifesto_analysis("A", "B", "C") == svc.ANALYSIS_OFFLINE


def test_http_error_falls_back(service):
    with patch("ballot_ledger.advisory.summary_service.requests.post") as mock_post:
        mock_post.return_value.status_code = 503
        assert service.simple_summary("text") == svc.SUMMARY_OFFLINE


def test_empty_answer_falls_back(service):
    with patch("ballot_ledger.advisory.summary_service.requests.post") as mock_post:
        mock_post.return_value.status_code = 200
        mock_post.return_value.json.return_value = {"text": ""}
        assert service.simple_summary("text") == svc.SUMMARY_EMPTY
        assert service.manifesto_analysis("A", "B", "C") == svc.ANALYSIS_EMPTY


def test_non_json_answer_falls_back(service):
    with patch("ballot_ledger.advisory.summary_service.requests.post") as mock_post:
        mock_post.return_value.status_code = 200
        mock_post.return_value.json.side_effect = ValueError("not json")
        assert service.simple_summary("text") == svc.SUMMARY_EMPTY


def test_voting_is_unaffected_when_service_is_down(core, election, make_voter):
    voter = make_voter()
    with patch("ballot_ledger.advisory.summary_service.requests.post", side_effect=requests.ConnectionError()):
        summary = core.advisory.simple_summary(election.description)
        core.ledger.cast_vote(election.id, voter.id, election.candidates[0].id)

    assert summary in (svc.SUMMARY_NO_KEY, svc.SUMMARY_OFFLINE)
    assert core.tally.candidate_tally(election.id) == {election.candidates[0].id: 1}
