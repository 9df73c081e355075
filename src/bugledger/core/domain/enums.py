"""
Domain Enums - Criticality and its wire encoding.

The ledger stores criticality as a small integer. The mapping is closed:
Low=0, Medium=1, High=2. Anything else read back from the ledger is
Unknown, and anything else offered for writing encodes to INVALID_CODE.
"""

from enum import Enum
from typing import Union


INVALID_CODE = -1


class Criticality(Enum):
    """Bug criticality as displayed to the user."""
    
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    UNKNOWN = "Unknown"
    
    @property
    def label(self) -> str:
        return self.value
    
    @property
    def code(self) -> int:
        """Wire code, or INVALID_CODE for UNKNOWN."""
        return _CODES.get(self, INVALID_CODE)
    
    @classmethod
    def selectable(cls) -> list["Criticality"]:
        """Values a user may pick when filing a bug."""
        return [cls.LOW, cls.MEDIUM, cls.HIGH]
    
    @classmethod
    def from_label(cls, label: str) -> "Criticality":
        """
        Parse a display label. Matching is exact: "medium" is not a label.
        
        Unrecognized labels return UNKNOWN rather than raising.
        """
        for member in cls.selectable():
            if member.value == label:
                return member
        return cls.UNKNOWN


_CODES = {
    Criticality.LOW: 0,
    Criticality.MEDIUM: 1,
    Criticality.HIGH: 2,
}

_BY_CODE = {code: member for member, code in _CODES.items()}


def encode_criticality(label: Union[str, Criticality]) -> int:
    """
    Encode a criticality label for the ledger.
    
    Args:
        label: Display label ("Low", "Medium", "High") or a Criticality
        
    Returns:
        0, 1 or 2; INVALID_CODE for anything outside the closed set.
        Callers must treat INVALID_CODE as a validation failure.
    """
    if isinstance(label, Criticality):
        return label.code
    return Criticality.from_label(label).code


def decode_criticality(code: int) -> Criticality:
    """
    Decode a ledger criticality code. Never raises.
    
    The ledger is an untrusted source, so any value this client did not
    write (including non-integers) decodes to UNKNOWN.
    """
    if isinstance(code, bool) or not isinstance(code, int):
        return Criticality.UNKNOWN
    return _BY_CODE.get(code, Criticality.UNKNOWN)
