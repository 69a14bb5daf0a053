"""
Subscriber Registry
===================

In-memory authority over active newsletter subscriptions.

- Emails are compared case-insensitively (stored as ``email.strip().lower()``)
- At most one active subscriber per email
- ``list_active()`` returns subscribers in sign-up order
- Expected failures (duplicate, not found, invalid email) come back as a
  ``SubscriptionResult``; nothing here raises for them

One registry instance is owned by the CloudSoft extension of each app and
lives as long as the process. Nothing is persisted.
"""

import logging
import threading
from dataclasses import asdict, dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

logger = logging.getLogger(__name__)

WELCOME_MESSAGE = "Welcome to our newsletter{name}! You'll receive updates soon."
DUPLICATE_MESSAGE = "You are already subscribed to our newsletter."
REMOVED_MESSAGE = "You have been successfully removed from our newsletter. We're sorry to see you go!"
NOT_FOUND_MESSAGE = "We couldn't find your subscription in our system."
INVALID_EMAIL_MESSAGE = "Please enter a valid email address."


class SubscriptionError(str, Enum):
    DUPLICATE_SUBSCRIPTION = 'duplicate_subscription'
    NOT_FOUND = 'not_found'
    INVALID_EMAIL = 'invalid_email'


def normalize_email(email: Optional[str]) -> str:
    """Canonical form used as the registry key"""
    return (email or '').strip().lower()


@dataclass(frozen=True)
class Subscriber:
    email: str
    name: Optional[str] = None
    subscribed_at: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> Dict[str, Optional[str]]:
        data = asdict(self)
        data['subscribed_at'] = self.subscribed_at.isoformat()
        return data


@dataclass(frozen=True)
class SubscriptionResult:
    is_success: bool
    message: str
    error: Optional[SubscriptionError] = None
    subscriber: Optional[Subscriber] = None

    @classmethod
    def success(cls, message: str, subscriber: Optional[Subscriber] = None) -> 'SubscriptionResult':
        return cls(True, message, None, subscriber)

    @classmethod
    def failure(cls, error: SubscriptionError, message: str) -> 'SubscriptionResult':
        return cls(False, message, error, None)


class SubscriberRegistry:
    """Thread-safe in-memory set of active subscribers, keyed by email."""

    def __init__(self):
        # dict keeps insertion order, which is the listing order
        self._subscribers: Dict[str, Subscriber] = {}
        self._lock = threading.Lock()

    def sign_up(self, subscriber: Subscriber) -> SubscriptionResult:
        """Add a subscriber unless the email is already active."""
        email = normalize_email(subscriber.email)
        if not email:
            return SubscriptionResult.failure(SubscriptionError.INVALID_EMAIL, INVALID_EMAIL_MESSAGE)

        name = (subscriber.name or '').strip() or None
        stored = replace(subscriber, email=email, name=name)

        with self._lock:
            if email in self._subscribers:
                logger.info(f"Duplicate sign-up rejected: {email}")
                return SubscriptionResult.failure(SubscriptionError.DUPLICATE_SUBSCRIPTION, DUPLICATE_MESSAGE)
            self._subscribers[email] = stored

        logger.info(f"New subscriber added: {email}")
        greeting = WELCOME_MESSAGE.format(name=f", {name}" if name else '')
        return SubscriptionResult.success(greeting, stored)

    def opt_out(self, email: str) -> SubscriptionResult:
        """Remove the active subscriber with this email."""
        email = normalize_email(email)
        if not email:
            return SubscriptionResult.failure(SubscriptionError.INVALID_EMAIL, INVALID_EMAIL_MESSAGE)

        with self._lock:
            removed = self._subscribers.pop(email, None)

        if removed is None:
            logger.info(f"Opt-out for unknown email: {email}")
            return SubscriptionResult.failure(SubscriptionError.NOT_FOUND, NOT_FOUND_MESSAGE)

        logger.info(f"Subscriber removed: {email}")
        return SubscriptionResult.success(REMOVED_MESSAGE, removed)

    def list_active(self) -> List[Subscriber]:
        """Snapshot of active subscribers in sign-up order"""
        with self._lock:
            return list(self._subscribers.values())

    def is_active(self, email: str) -> bool:
        email = normalize_email(email)
        with self._lock:
            return email in self._subscribers

    def count(self) -> int:
        with self._lock:
            return len(self._subscribers)

    def latest_signup(self) -> Optional[datetime]:
        """Timestamp of the most recent active sign-up, None when empty"""
        with self._lock:
            if not self._subscribers:
                return None
            return max(s.subscribed_at for s in self._subscribers.values())

    def __len__(self):
        return self.count()
