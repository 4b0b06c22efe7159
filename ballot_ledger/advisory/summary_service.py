# ballot_ledger/advisory/summary_service.py

# Optional plain-language summaries from an external text service. Voting and
# tallying never wait on this: every failure path returns a fallback string.

import logging
from typing import Optional

import requests

logger = logging.getLogger(__name__)

SUMMARY_NO_KEY = "AI Summary unavailable (No API Key)."
SUMMARY_OFFLINE = "Summary temporarily unavailable (Offline)."
SUMMARY_EMPTY = "Could not generate summary."

ANALYSIS_NO_KEY = "AI Analysis unavailable."
ANALYSIS_OFFLINE = "Analysis unavailable (Offline)."
ANALYSIS_EMPTY = "Could not analyze."


class SummaryService:
    def __init__(self, url: str, api_key: str = '', timeout_s: float = 5.0, model: str = 'gemini-2.5-flash'):
        """
        Args:
            url: Endpoint accepting ``{"model", "contents"}`` and answering ``{"text"}``
            api_key: Bearer credential; without one no request is made
            timeout_s: Upper bound for the whole round trip
            model: Model name forwarded to the service
        """
        self.url = url
        self.api_key = api_key or ''
        self.timeout_s = timeout_s
        self.model = model

    @classmethod
    def from_config(cls, config):
        return cls(
            url=config.get('ADVISORY_SERVICE_URL', ''),
            api_key=config.get('ADVISORY_API_KEY', ''),
            timeout_s=config.get('ADVISORY_TIMEOUT_S', 5.0),
        )

    def _generate(self, contents: str) -> Optional[str]:
        """
        Returns:
            The generated text, '' when the service answered without text, or
            None when the service could not be reached or refused the request.
        """
        try:
            response = requests.post(
                self.url,
                json={"model": self.model, "contents": contents},
                headers={"Authorization": f"Bearer {self.api_key}"},
                timeout=self.timeout_s,
            )
        except requests.RequestException as e:
            logger.warning("Advisory service skipped due to network/access error: %s", e)
            return None
        if response.status_code != 200:
            logger.warning("Advisory service answered %s", response.status_code)
            return None
        try:
            body = response.json()
        except ValueError:
            logger.warning("Advisory service returned a non-JSON body")
            return ''
        text = body.get("text") if isinstance(body, dict) else None
        return (text or '').strip()

    def simple_summary(self, text: str) -> str:
        if not self.api_key:
            return SUMMARY_NO_KEY
        result = self._generate(
            "Provide a very simple, easy-to-read summary of the following text for a voter "
            f'with reading difficulties. Keep it under 50 words: "{text}"'
        )
        if result is None:
            return SUMMARY_OFFLINE
        return result or SUMMARY_EMPTY

    def manifesto_analysis(self, candidate_name: str, party: str, manifesto: str) -> str:
        if not self.api_key:
            return ANALYSIS_NO_KEY
        result = self._generate(
            f"Analyze the following manifesto for candidate {candidate_name} ({party}). "
            "Highlight 3 key bullet points affecting the daily life of a citizen. "
            f'Text: "{manifesto}"'
        )
        if result is None:
            return ANALYSIS_OFFLINE
        return result or ANALYSIS_EMPTY
