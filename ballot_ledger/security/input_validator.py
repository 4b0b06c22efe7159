# ballot_ledger/security/input_validator.py

import re
import bleach

from ballot_ledger.errors import InvalidInput

# Validation and sanitisation of free text that enters the roll and the catalog


class InputValidator:
    def __init__(self):
        self.patterns = {
            'email': re.compile(r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'),
            'voter_id': re.compile(r'^VOT-\d{4}-\d{4}$'),
            'image_url': re.compile(r'^https?://\S+$', re.IGNORECASE),
            'xss_script': re.compile(r'<script[^>]*>.*?</script>', re.IGNORECASE | re.DOTALL),
            'xss_event': re.compile(r'\bon\w+\s*=', re.IGNORECASE)
        }

    def sanitize_string(self, input_str, max_length=255):
        if not isinstance(input_str, str):
            raise ValueError("Input must be a string")
        if len(input_str) > max_length:
            input_str = input_str[:max_length]

        sanitized = re.sub(self.patterns['xss_script'], '', input_str)
        sanitized = re.sub(self.patterns['xss_event'], '', sanitized)

        # No markup survives into stored text; bleach escapes what it does not strip
        sanitized = bleach.clean(sanitized, tags=set(), attributes={}, strip=True)
        return sanitized.strip()

    def clean_text(self, value, max_length=255):
        """sanitize_string for store input: None reads as empty, anything else not a string is InvalidInput."""
        if value is None:
            return ''
        try:
            return self.sanitize_string(value, max_length=max_length)
        except ValueError as e:
            raise InvalidInput(f"Expected text, got {type(value).__name__}") from e

    def normalize_email(self, email):
        if not isinstance(email, str):
            return None
        email = email.strip().lower()
        return email if self.validate_email(email) else None

    def validate_email(self, email):
        return isinstance(email, str) and bool(self.patterns['email'].match(email))

    def validate_voter_id(self, voter_id):
        return isinstance(voter_id, str) and bool(self.patterns['voter_id'].match(voter_id))

    def validate_image_url(self, url):
        return isinstance(url, str) and bool(self.patterns['image_url'].match(url))
