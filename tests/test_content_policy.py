# tests/test_content_policy.py
"""Tests for message validation and sanitization."""

import re

import pytest

from huddle.core.errors import ValidationFailedError, ValidationReason
from huddle.models import MessageType
from huddle.services.content_policy import ContentPolicy, SpamRule


@pytest.fixture()
def policy() -> ContentPolicy:
    return ContentPolicy(max_length=10_000)


def _reason(excinfo: pytest.ExceptionInfo[ValidationFailedError]) -> ValidationReason:
    return excinfo.value.reason


def test_script_tags_are_stripped_and_text_escaped(policy: ContentPolicy) -> None:
    """Markup is removed and remaining special characters are entity-escaped."""
    result = policy.prepare("<script>alert('x')</script>Hello", MessageType.TEXT)
    assert "<" not in result
    assert result == "alert(&#x27;x&#x27;)Hello"


def test_lone_angle_bracket_is_escaped_not_stripped(policy: ContentPolicy) -> None:
    assert policy.prepare("a < b", MessageType.TEXT) == "a &lt; b"


def test_repeated_characters_flagged_as_spam(policy: ContentPolicy) -> None:
    with pytest.raises(ValidationFailedError) as excinfo:
        policy.validate("a" * 25, MessageType.TEXT)
    assert _reason(excinfo) == ValidationReason.SPAM_SUSPECTED
    assert excinfo.value.rule == "repeated_characters"


def test_repeated_character_threshold(policy: ContentPolicy) -> None:
    policy.validate("a" * 19, MessageType.TEXT)
    with pytest.raises(ValidationFailedError):
        policy.validate("a" * 20, MessageType.TEXT)


@pytest.mark.parametrize(
    ("content", "rule"),
    [
        ("see http://a.example http://b.example http://c.example", "url_sequence"),
        ("CLICK HERE for prizes", "spam_phrase"),
        ("card 1234 5678 9012 3456 thanks", "card_number"),
        ("write to bob@example.com", "email_address"),
        ("only $100 today", "currency_amount"),
        ("send 50 EUR", "currency_amount"),
    ],
)
def test_each_spam_rule(policy: ContentPolicy, content: str, rule: str) -> None:
    with pytest.raises(ValidationFailedError) as excinfo:
        policy.validate(content, MessageType.TEXT)
    assert _reason(excinfo) == ValidationReason.SPAM_SUSPECTED
    assert excinfo.value.rule == rule


def test_spam_rules_are_pluggable() -> None:
    lenient = ContentPolicy(spam_rules=(), max_length=100)
    assert lenient.prepare("a" * 25, MessageType.TEXT) == "a" * 25

    strict = ContentPolicy(
        spam_rules=(SpamRule("no_cheese", re.compile("cheese", re.IGNORECASE)),),
        max_length=100,
    )
    with pytest.raises(ValidationFailedError) as excinfo:
        strict.validate("I like Cheese", MessageType.TEXT)
    assert excinfo.value.rule == "no_cheese"


@pytest.mark.parametrize("content", ["", "   ", "\n\t "])
def test_blank_content_rejected(policy: ContentPolicy, content: str) -> None:
    with pytest.raises(ValidationFailedError) as excinfo:
        policy.prepare(content, MessageType.TEXT)
    assert _reason(excinfo) == ValidationReason.EMPTY


def test_markup_only_content_rejected_as_empty(policy: ContentPolicy) -> None:
    with pytest.raises(ValidationFailedError) as excinfo:
        policy.prepare("<b></b>", MessageType.TEXT)
    assert _reason(excinfo) == ValidationReason.EMPTY


def test_length_limit() -> None:
    policy = ContentPolicy(max_length=10)
    policy.validate("hello you!", MessageType.TEXT)
    with pytest.raises(ValidationFailedError) as excinfo:
        policy.validate("hello world", MessageType.TEXT)
    assert _reason(excinfo) == ValidationReason.TOO_LONG


def test_unknown_type_rejected(policy: ContentPolicy) -> None:
    with pytest.raises(ValidationFailedError) as excinfo:
        policy.prepare("hello", "video")
    assert _reason(excinfo) == ValidationReason.INVALID_TYPE


@pytest.mark.parametrize(
    ("content", "message_type"),
    [
        ("https://cdn.example.com/photos/cat.png", MessageType.IMAGE),
        ("uploads/cat.JPG", MessageType.IMAGE),
        ("ftp://files.example.com/report", MessageType.FILE),
        ("docs/report-2024.pdf", MessageType.FILE),
        ("  notes.txt  ", MessageType.FILE),
    ],
)
def test_valid_references(policy: ContentPolicy, content: str, message_type: MessageType) -> None:
    assert policy.prepare(content, message_type) == content.strip()


@pytest.mark.parametrize(
    ("content", "message_type"),
    [
        ("not a url", MessageType.IMAGE),
        ("photo.bmp", MessageType.IMAGE),
        ("example.com/cat.png?size=2", MessageType.IMAGE),
        ("https:///missing-host", MessageType.FILE),
    ],
)
def test_invalid_references(policy: ContentPolicy, content: str, message_type: MessageType) -> None:
    with pytest.raises(ValidationFailedError) as excinfo:
        policy.validate(content, message_type)
    assert _reason(excinfo) == ValidationReason.INVALID_REFERENCE


def test_reference_content_skips_spam_rules(policy: ContentPolicy) -> None:
    url = "https://cdn.example.com/" + "a" * 30 + ".png"
    assert policy.prepare(url, MessageType.IMAGE) == url


def test_reference_sanitize_drops_characters_illegal_in_urls(policy: ContentPolicy) -> None:
    assert policy.sanitize(' https://example.com/a<b>"c".png ', MessageType.IMAGE) == (
        "https://example.com/abc.png"
    )


def test_normalize_line_endings_and_control_characters(policy: ContentPolicy) -> None:
    assert policy.normalize("a\r\nb\rc") == "a\nb\nc"
    assert policy.normalize("bell\x07 ok") == "bell ok"
    assert policy.normalize("a\n\n\n\n\n\nb") == "a\n\n\nb"


def test_text_whitespace_collapsed(policy: ContentPolicy) -> None:
    assert policy.prepare("  hello \t   world  ", MessageType.TEXT) == "hello world"
    assert policy.prepare("one\n\n\n\n\ntwo", MessageType.TEXT) == "one\n\n\ntwo"
