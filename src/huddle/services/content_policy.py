"""Validation and sanitization of message payloads.

Everything here is pure: no session, no clock. Spam detection is a tuple of
:class:`SpamRule` values so deployments can swap the heuristics without
touching the message ledger.
"""
from __future__ import annotations

import html
import re
from collections.abc import Sequence
from dataclasses import dataclass
from urllib.parse import urlsplit

from huddle.core.errors import ValidationFailedError, ValidationReason
from huddle.core.settings import settings
from huddle.models.message import MessageType

__all__ = [
    "SpamRule",
    "DEFAULT_SPAM_RULES",
    "ContentPolicy",
    "content_policy",
]


@dataclass(frozen=True)
class SpamRule:
    """Named regular expression; a match marks text content as spam."""

    name: str
    pattern: re.Pattern[str]

    def matches(self, content: str) -> bool:
        return self.pattern.search(content) is not None


DEFAULT_SPAM_RULES: tuple[SpamRule, ...] = (
    SpamRule("repeated_characters", re.compile(r"(.)\1{19,}")),
    SpamRule(
        "url_sequence",
        re.compile(r"https?://\S+\s+https?://\S+\s+https?://"),
    ),
    SpamRule(
        "spam_phrase",
        re.compile(
            r"\b(buy now|click here|free money|win now|act now|limited time|urgent|congratulations)\b",
            re.IGNORECASE,
        ),
    ),
    SpamRule("card_number", re.compile(r"\b\d{4}[\s-]?\d{4}[\s-]?\d{4}[\s-]?\d{4}\b")),
    SpamRule(
        "email_address",
        re.compile(r"\b[A-Z0-9._%+-]+@[A-Z0-9.-]+\.[A-Z]{2,}\b", re.IGNORECASE),
    ),
    SpamRule(
        "currency_amount",
        re.compile(r"\$\d+|\d+\s*USD|\d+\s*EUR|\d+\s*GBP", re.IGNORECASE),
    ),
)

_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")
_NEWLINE_RUN = re.compile(r"\n{4,}")
_HORIZONTAL_SPACE = re.compile(r"[ \t]+")
_TAG = re.compile(r"<(?=[A-Za-z/!?])[^>]*>?")
_FILE_REFERENCE = re.compile(
    r"[a-zA-Z0-9_\-/.]+\.(jpg|jpeg|png|gif|pdf|doc|docx|txt)",
    re.IGNORECASE,
)
# Anything outside RFC 3986 unreserved/reserved characters and percent escapes.
_URL_ILLEGAL = re.compile(r"[^A-Za-z0-9\-._~:/?#\[\]@!$&'()*+,;=%]")
_SCHEME = re.compile(r"[A-Za-z][A-Za-z0-9+.\-]*")


class ContentPolicy:
    """Stateless rules applied to message content before it is stored."""

    def __init__(
        self,
        spam_rules: Sequence[SpamRule] = DEFAULT_SPAM_RULES,
        max_length: int | None = None,
    ) -> None:
        self.spam_rules = tuple(spam_rules)
        self.max_length = settings.message_max_length if max_length is None else max_length

    @staticmethod
    def coerce_type(message_type: MessageType | str) -> MessageType:
        try:
            return MessageType(message_type)
        except ValueError as exc:
            raise ValidationFailedError(
                ValidationReason.INVALID_TYPE,
                "Invalid message type. Must be text, image, or file.",
            ) from exc

    def normalize(self, content: str) -> str:
        """Drop control characters, unify line endings, cap blank-line runs."""
        content = _CONTROL_CHARS.sub("", content)
        content = content.replace("\r\n", "\n").replace("\r", "\n")
        return _NEWLINE_RUN.sub("\n\n\n", content)

    def validate(self, content: str, message_type: MessageType | str) -> None:
        """Raise :class:`ValidationFailedError` if ``content`` is not acceptable."""
        message_type = self.coerce_type(message_type)

        if not content.strip():
            raise ValidationFailedError(
                ValidationReason.EMPTY, "Message content cannot be empty."
            )
        if len(content) > self.max_length:
            raise ValidationFailedError(
                ValidationReason.TOO_LONG,
                f"Message content cannot exceed {self.max_length:,} characters.",
            )

        if message_type == MessageType.TEXT:
            rule = self.matching_spam_rule(content)
            if rule is not None:
                raise ValidationFailedError(
                    ValidationReason.SPAM_SUSPECTED,
                    "Message content appears to contain spam or inappropriate content.",
                    rule=rule.name,
                )
            return

        reference = content.strip()
        if not (self.is_absolute_url(reference) or self.is_file_reference(reference)):
            raise ValidationFailedError(
                ValidationReason.INVALID_REFERENCE,
                f"{message_type.value.capitalize()} message must contain a valid URL "
                "or file reference.",
            )

    def sanitize(self, content: str, message_type: MessageType | str) -> str:
        message_type = self.coerce_type(message_type)
        if message_type == MessageType.TEXT:
            return self._sanitize_text(content)
        return _URL_ILLEGAL.sub("", content.strip())

    def prepare(self, content: str, message_type: MessageType | str) -> str:
        """Normalize, validate and sanitize ``content`` for storage."""
        content = self.normalize(content)
        self.validate(content, message_type)
        sanitized = self.sanitize(content, message_type)
        if not sanitized:
            # e.g. markup-only text that strips down to nothing
            raise ValidationFailedError(
                ValidationReason.EMPTY, "Message content cannot be empty."
            )
        return sanitized

    def matching_spam_rule(self, content: str) -> SpamRule | None:
        for rule in self.spam_rules:
            if rule.matches(content):
                return rule
        return None

    @staticmethod
    def is_absolute_url(value: str) -> bool:
        if not value or any(char.isspace() for char in value):
            return False
        try:
            parts = urlsplit(value)
        except ValueError:
            return False
        return bool(_SCHEME.fullmatch(parts.scheme or "")) and bool(parts.netloc)

    @staticmethod
    def is_file_reference(value: str) -> bool:
        return _FILE_REFERENCE.fullmatch(value) is not None

    @staticmethod
    def _sanitize_text(content: str) -> str:
        content = _TAG.sub("", content)
        content = html.escape(content, quote=True)
        content = _HORIZONTAL_SPACE.sub(" ", content)
        content = _NEWLINE_RUN.sub("\n\n\n", content)
        return content.strip()


content_policy = ContentPolicy()
