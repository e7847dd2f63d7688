"""DNSBL reply code models."""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import FrozenSet, Iterable

from dnsbl_resolver.utils.ip_utils import reply_code


NOT_LISTED_MARKER = "NL"


class ReplyCode(IntEnum):
    """zen.spamhaus.org return codes (final octet of 127.0.0.x)."""

    NL = 0  # Not listed
    SBL = 2  # Spamhaus Block List
    SBLCSS = 3  # SBL CSS data
    XBL = 4  # Exploits Block List
    DROP = 9  # DROP/EDROP, returned in addition to SBL
    PBL_ISP = 10  # Policy Block List, ISP maintained
    PBL = 11  # Policy Block List, Spamhaus maintained


def code_name(code: int) -> str:
    """Return the ReplyCode member name for code, or its decimal string."""
    try:
        return ReplyCode(code).name
    except ValueError:
        return str(code)


@dataclass(frozen=True)
class Classification:
    """Set of reply codes observed for one DNSBL query.

    Codes are kept as a set because the catalogue is an enumeration, not a
    bitmask: OR-ing 2 and 9 gives 11, which is PBL. ``legacy_value`` still
    exposes the OR-accumulated value for consumers of the historic string form.

    Attributes:
        codes: Raw reply codes, one per answer record.
    """

    codes: FrozenSet[int] = field(default_factory=frozenset)

    @classmethod
    def from_codes(cls, codes: Iterable[int]) -> "Classification":
        return cls(codes=frozenset(int(code) for code in codes))

    @classmethod
    def from_answers(cls, answers: Iterable[str]) -> "Classification":
        """Build a classification from A record answers such as "127.0.0.2"."""
        return cls.from_codes(reply_code(answer) for answer in answers)

    def is_listed(self) -> bool:
        """Check if any observed code indicates a listing.

        Returns:
            bool: False for an empty set or a set holding only NL.
        """
        return any(code != ReplyCode.NL for code in self.codes)

    @property
    def legacy_value(self) -> int:
        """Bitwise OR of all observed codes.

        Deprecated: collides with unrelated codes (2 | 9 == 11).
        """
        value = 0
        for code in self.codes:
            value |= code
        return value

    def legacy_name(self) -> str:
        """Historic string form: member name of legacy_value, else its number."""
        return code_name(self.legacy_value)

    def code_names(self) -> str:
        """Listed code names joined with '+', e.g. "SBL+XBL"."""
        listed = sorted(code for code in self.codes if code != ReplyCode.NL)
        if not listed:
            return NOT_LISTED_MARKER
        return "+".join(code_name(code) for code in listed)

    def to_identifier(self, legacy: bool = True) -> str:
        """String stored in the block tree and returned to callers.

        Args:
            legacy: Use the OR-accumulated name instead of the code set.

        Returns:
            str: NOT_LISTED_MARKER when not listed, else the chosen representation.
        """
        if not self.is_listed():
            return NOT_LISTED_MARKER
        return self.legacy_name() if legacy else self.code_names()
