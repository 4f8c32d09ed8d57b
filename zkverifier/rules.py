"""
Validation Rules
================

[RULES] Small composable predicates over single public signal values.

Each rule raises RuleError on failure and returns None on success. Helpers
turn rule results into outcomes: None (pass), an exception (fail) or SKIPPED
when the option driving the rule is unset.

[OR] or_error() combines two alternative checks: at least one must pass,
skipped checks do not count, when both fail both errors are reported.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, time, timezone
from enum import Enum
from typing import Any, Dict, Tuple, Union

import bech32

from .encoding import decode_bytes, parse_zk_date
from .errors import ConfigurationError, RuleError

# Sentinel for unset integer options
UNSET_INT = -1

RARIMO_ADDRESS_PREFIX = "rarimo"


class _Skipped:
    """Marker for a check that did not run."""

    def __repr__(self) -> str:
        return "SKIPPED"


SKIPPED = _Skipped()

Outcome = Union[None, Exception, _Skipped]


class Rule(ABC):
    """Predicate over one decoded signal value."""

    @abstractmethod
    def validate(self, value: Any) -> None:
        """Raise RuleError when value does not satisfy the rule."""


# ============================================================================
# Generic rules
# ============================================================================

class RequiredRule(Rule):
    def validate(self, value: Any) -> None:
        if value is None or value == "":
            raise RuleError("cannot be blank")


REQUIRED = RequiredRule()


@dataclass(frozen=True)
class InRule(Rule):
    """Value must equal one of the accepted values."""
    accepted: Tuple[Any, ...]

    def validate(self, value: Any) -> None:
        if value not in self.accepted:
            raise RuleError("must be a valid value")


def is_in(*accepted: Any) -> InRule:
    return InRule(tuple(accepted))


@dataclass(frozen=True)
class MaxRule(Rule):
    """Value must be no greater than the limit."""
    limit: Any

    def validate(self, value: Any) -> None:
        if value > self.limit:
            raise RuleError(f"must be no greater than {self.limit}")


# ============================================================================
# Date rules
# ============================================================================

class DateMode(Enum):
    BEFORE = "before"
    AFTER = "after"
    EQUAL = "equal"


@dataclass(frozen=True)
class DateRule(Rule):
    """
    Compares a packed YYMMDD date with a point in time.

    Dates decode to midnight UTC. EQUAL compares the calendar day only.
    An empty ZK date does not parse and fails every mode.
    """
    point: datetime
    mode: DateMode

    def validate(self, value: Any) -> None:
        if not isinstance(value, str):
            raise RuleError(f"invalid type: {type(value).__name__}, expected string")

        parsed = parse_zk_date(value)

        if self.mode is DateMode.EQUAL:
            if parsed != self.point.date():
                raise RuleError("dates are not equal")
            return None

        moment = datetime.combine(parsed, time.min, tzinfo=timezone.utc)
        if self.mode is DateMode.BEFORE and moment > self.point:
            raise RuleError("date is too late")
        if self.mode is DateMode.AFTER and moment < self.point:
            raise RuleError("date is too early")
        return None


def before_date(point: datetime) -> DateRule:
    return DateRule(point, DateMode.BEFORE)


def after_date(point: datetime) -> DateRule:
    return DateRule(point, DateMode.AFTER)


def equal_date(point: datetime) -> DateRule:
    return DateRule(point, DateMode.EQUAL)


def years_ago(now: datetime, years: int) -> datetime:
    """Same calendar day `years` ago, Feb 29 rolls over to Mar 1."""
    try:
        return now.replace(year=now.year - years)
    except ValueError:
        return now.replace(year=now.year - years, month=3, day=1)


def start_of_day(moment: datetime) -> datetime:
    return datetime.combine(moment.date(), time.min, tzinfo=timezone.utc)


# ============================================================================
# Event data rules
# ============================================================================

class EventDataRule(Rule):
    """Closed set of event data matchers: raw bytes or bech32 address."""


@dataclass(frozen=True)
class BytesEventData(EventDataRule):
    """Decoded event data must equal the expected bytes."""
    expected: bytes

    def validate(self, value: Any) -> None:
        if not isinstance(value, str):
            raise RuleError(f"invalid type: {type(value).__name__}, expected string")
        if decode_bytes(value) != self.expected:
            raise RuleError("event data does not match")


@dataclass(frozen=True)
class AddressEventData(EventDataRule):
    """
    Decoded event data must be the given bech32 address.

    The circuit packs the address as 5-bit bech32 words. A payload of exactly
    20 bytes is treated as the raw 8-bit address instead.
    """
    address: str
    prefix: str
    words: Tuple[int, ...]
    raw: bytes

    @classmethod
    def parse(cls, address: str, prefix: str = RARIMO_ADDRESS_PREFIX) -> "AddressEventData":
        """
        Raises:
            ConfigurationError: address is not valid bech32 with the prefix
        """
        hrp, words = bech32.bech32_decode(address)
        if hrp is None or words is None:
            raise ConfigurationError(f"invalid bech32 address: {address!r}")
        if hrp != prefix:
            raise ConfigurationError(f"address prefix {hrp!r} does not match {prefix!r}")

        raw = bech32.convertbits(words, 5, 8, False)
        if raw is None:
            raise ConfigurationError(f"invalid bech32 address payload: {address!r}")

        return cls(address=address.lower(), prefix=hrp, words=tuple(words), raw=bytes(raw))

    def validate(self, value: Any) -> None:
        if not isinstance(value, str):
            raise RuleError(f"invalid type: {type(value).__name__}, expected string")

        payload = decode_bytes(value)
        if len(payload) == 20:
            if payload != self.raw:
                raise RuleError("address does not match")
            return

        # leading zero words are lost in the big integer
        payload = payload.rjust(len(self.words), b"\x00")
        if any(b >= 32 for b in payload):
            raise RuleError("event data is not a bech32 payload")

        if bech32.bech32_encode(self.prefix, list(payload)) != self.address:
            raise RuleError("address does not match")


# ============================================================================
# Helpers
# ============================================================================

def validate(value: Any, *rules: Rule) -> Outcome:
    """Run rules in order, first failure wins."""
    for rule in rules:
        try:
            rule.validate(value)
        except RuleError as e:
            return e
    return None


def is_unset(option: Any) -> bool:
    """Option holds its "unset" sentinel."""
    if option is None:
        return True
    if isinstance(option, bool):
        return not option
    if isinstance(option, int):
        return option == UNSET_INT
    if isinstance(option, (str, bytes, tuple, list, set, frozenset)):
        return len(option) == 0
    return False


def validate_on_opt_set(value: Any, option: Any, *rules: Rule) -> Outcome:
    """Value is required and checked only when the option is set."""
    if is_unset(option):
        return SKIPPED
    return validate(value, REQUIRED, *rules)


def or_error(one: Outcome, another: Outcome, fields: Tuple[str, str]) -> Dict[str, Exception]:
    """
    OR logic: at least one of the configured checks must pass.

    Skipped checks are ignored, so a single configured check is authoritative
    and two skipped checks pass. When all configured checks fail, every error
    is returned under its own field.
    """
    active = {
        name: outcome
        for name, outcome in zip(fields, (one, another))
        if outcome is not SKIPPED
    }
    if not active or any(outcome is None for outcome in active.values()):
        return {}
    return active


def errors_only(outcomes: Dict[str, Outcome]) -> Dict[str, Exception]:
    """Keep real failures, drop passes and skips."""
    return {k: v for k, v in outcomes.items() if isinstance(v, Exception)}
