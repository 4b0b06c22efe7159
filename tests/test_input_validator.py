import pytest

from ballot_ledger.errors import InvalidInput
from ballot_ledger.security.input_validator import InputValidator


@pytest.fixture
def validator():
    return InputValidator()


def test_sanitize_string_basic(validator):
    # Basic string sanitization
    assert validator.sanitize_string("Hello World") == "Hello World"
    assert validator.sanitize_string(" extra spaces  ") == "extra spaces"

    # HTML tag stripping
    assert validator.sanitize_string("<p>text</p>") == "text"
    assert validator.sanitize_string('<b>bold</b>') == "bold"

    # Max length
    long_string = "a" * 300
    assert len(validator.sanitize_string(long_string)) == 255

    # XSS prevention
    assert validator.sanitize_string('<script>alert("xss")</script>') == ""
    assert 'onclick' not in validator.sanitize_string('<a onclick=alert(1)>x</a>')


def test_sanitize_string_rejects_non_strings(validator):
    with pytest.raises(ValueError):
        validator.sanitize_string(42)


def test_clean_text_reports_invalid_input(validator):
    assert validator.clean_text(None) == ""
    assert validator.clean_text("  <b>Mayor</b> 2025 ") == "Mayor 2025"
    with pytest.raises(InvalidInput):
        validator.clean_text(2025)


def test_email_validation_and_normalization(validator):
    assert validator.validate_email("jane@demo.com") is True
    assert validator.validate_email("jane@demo") is False
    assert validator.validate_email(None) is False

    assert validator.normalize_email("  Jane@Demo.COM ") == "jane@demo.com"
    assert validator.normalize_email("bad email") is None
    assert validator.normalize_email(None) is None


def test_voter_id_format(validator):
    assert validator.validate_voter_id("VOT-2025-8842") is True
    assert validator.validate_voter_id("VOT-25-8842") is False
    assert validator.validate_voter_id("ABC1234567") is False


def test_image_url(validator):
    assert validator.validate_image_url("https://picsum.photos/200/200?random=1") is True
    assert validator.validate_image_url("javascript:alert(1)") is False
