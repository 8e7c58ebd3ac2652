"""
BBL (Borough-Block-Lot) parsing and formatting.

Every record lookup keys on the BBL triple. Sources disagree on string
encoding: ACRIS and the URL form use unpadded hyphenated parts ("1-13-1"),
the tax lot / SBL form packs 1 + 5 + 4 digits ("1000130001"), and some
DOF extracts pad the lot to 5 digits. ``BBL.padded`` lets each caller pick
the widths its source expects.
"""

from __future__ import annotations

import re
from typing import NamedTuple

from src.exceptions import InvalidBBLError

BOROUGHS = {
    1: "MANHATTAN",
    2: "BRONX",
    3: "BROOKLYN",
    4: "QUEENS",
    5: "STATEN ISLAND",
}

MAX_BLOCK = 99999
MAX_LOT = 9999

_SBL_RE = re.compile(r"^\d{10}$")
_PART_RE = re.compile(r"^\d+$")


class BBL(NamedTuple):
    borough: int
    block: int
    lot: int

    @classmethod
    def from_sbl(cls, sbl: str) -> BBL:
        """Parse the 10-digit tax lot form (borough 1, block 5, lot 4)."""
        raw = (sbl or "").strip()
        if not _SBL_RE.match(raw):
            raise InvalidBBLError(f"Invalid SBL format: {sbl}. Expected 10 digits")
        return _validated(int(raw[0]), int(raw[1:6]), int(raw[6:10]), raw=sbl)

    @property
    def borough_name(self) -> str:
        return BOROUGHS[self.borough]

    def hyphenated(self) -> str:
        return f"{self.borough}-{self.block}-{self.lot}"

    def padded(self, block_width: int = 5, lot_width: int = 4) -> tuple[str, str, str]:
        return (
            str(self.borough),
            str(self.block).zfill(block_width),
            str(self.lot).zfill(lot_width),
        )

    def to_sbl(self) -> str:
        return "".join(self.padded(block_width=5, lot_width=4))

    def __str__(self) -> str:
        return self.hyphenated()


def _validated(borough: int, block: int, lot: int, *, raw: object) -> BBL:
    if borough not in BOROUGHS:
        raise InvalidBBLError(
            f"Invalid BBL borough: {raw}. Borough must be 1-5, got {borough}"
        )
    if not 1 <= block <= MAX_BLOCK:
        raise InvalidBBLError(f"Invalid BBL block: {raw}. Block must be 1-{MAX_BLOCK}")
    if not 1 <= lot <= MAX_LOT:
        raise InvalidBBLError(f"Invalid BBL lot: {raw}. Lot must be 1-{MAX_LOT}")
    return BBL(borough, block, lot)


def parse_bbl(value: BBL | str) -> BBL:
    """
    Parse and validate a BBL.

    Accepts a ``BBL``, a hyphenated string ("1-13-1", "1-00013-0001") or the
    10-digit SBL form ("1000130001").

    Raises:
        InvalidBBLError: malformed input, non-numeric parts, or out-of-range values.
    """
    if isinstance(value, BBL):
        return _validated(value.borough, value.block, value.lot, raw=value)
    if not isinstance(value, str):
        raise InvalidBBLError(f"Invalid BBL format: {value!r}. Expected a string")

    raw = value.strip()
    if _SBL_RE.match(raw):
        return BBL.from_sbl(raw)

    parts = [p.strip() for p in raw.split("-")]
    if len(parts) != 3:
        raise InvalidBBLError(
            f"Invalid BBL format: {value}. Expected format: borough-block-lot (e.g., 1-13-1)"
        )
    if not all(_PART_RE.match(p) for p in parts):
        raise InvalidBBLError(
            f"Invalid BBL components: {value}. Borough, block and lot must all be numeric"
        )
    return _validated(int(parts[0]), int(parts[1]), int(parts[2]), raw=value)


def bbl_to_sbl(bbl: BBL | str) -> str:
    """Convert "4-476-1" to "4004760001"."""
    return parse_bbl(bbl).to_sbl()


def sbl_to_bbl(sbl: str) -> str:
    """Convert "4004760001" to "4-476-1"."""
    return BBL.from_sbl(sbl).hyphenated()
