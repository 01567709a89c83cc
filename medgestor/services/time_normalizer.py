"""Conversion between the clinic's local date/time strings and UTC instants."""

import re
from datetime import datetime

import pytz

from medgestor.core.exceptions import MalformedDateException, PastDateException

DISPLAY_FORMAT = "%d/%m/%Y %H:%M"
DATE_INPUT_FORMAT = "%Y-%m-%d"
TIME_INPUT_FORMAT = "%H:%M"

# strptime alone accepts single-digit fields, so the shape is checked first
_DISPLAY_PATTERN = re.compile(r"^\d{2}/\d{2}/\d{4} \d{2}:\d{2}$")


class TimeNormalizer:
    """Parse, validate and format appointment dates in a fixed local timezone."""

    def __init__(self, timezone_name: str = "America/Sao_Paulo"):
        """Initialize with the timezone used for entry and display."""
        self.tz = pytz.timezone(timezone_name)

    def parse(self, raw: str) -> datetime:
        """
        Parse a ``dd/mm/yyyy hh:mm`` string into an aware UTC datetime.

        Args:
            raw: Local date and time as typed by the user

        Returns:
            UTC instant with seconds and microseconds set to zero

        Raises:
            MalformedDateException: If the string does not match the pattern
                or names an impossible or ambiguous local time
        """
        if not isinstance(raw, str) or not _DISPLAY_PATTERN.match(raw):
            raise MalformedDateException()

        try:
            naive = datetime.strptime(raw, DISPLAY_FORMAT)
        except ValueError as e:
            raise MalformedDateException() from e

        # Wall-clock times repeated or skipped by a DST change name no single instant
        try:
            local = self.tz.localize(naive, is_dst=None)
        except pytz.exceptions.InvalidTimeError as e:
            raise MalformedDateException() from e

        return local.astimezone(pytz.utc).replace(second=0, microsecond=0)

    def parse_and_validate(self, raw: str, reference_now: datetime) -> datetime:
        """
        Parse a local date string and require it to be in the future.

        Args:
            raw: Local date and time, ``dd/mm/yyyy hh:mm``
            reference_now: Aware datetime the result must be strictly after

        Returns:
            UTC instant

        Raises:
            MalformedDateException: If the string cannot be parsed
            PastDateException: If the instant is not after ``reference_now``
        """
        instant = self.parse(raw)
        if instant <= self._as_utc(reference_now):
            raise PastDateException()
        return instant

    def format(self, instant: datetime) -> str:
        """Format a UTC instant as ``dd/mm/yyyy hh:mm`` in local time."""
        return self._to_local(instant).strftime(DISPLAY_FORMAT)

    def format_date(self, instant: datetime) -> str:
        """Local calendar date as ``yyyy-mm-dd`` (HTML date input)."""
        return self._to_local(instant).strftime(DATE_INPUT_FORMAT)

    def format_time(self, instant: datetime) -> str:
        """Local wall-clock time as ``hh:mm`` (HTML time input)."""
        return self._to_local(instant).strftime(TIME_INPUT_FORMAT)

    def _to_local(self, instant: datetime) -> datetime:
        return self._as_utc(instant).astimezone(self.tz)

    @staticmethod
    def _as_utc(value: datetime) -> datetime:
        # Naive values come from the database driver or tests and are UTC
        if value.tzinfo is None:
            return pytz.utc.localize(value)
        return value.astimezone(pytz.utc)
