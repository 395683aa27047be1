# src/dealcore/analysis/section8.py
from __future__ import annotations

import re
from typing import Sequence

from dealcore.domain.assumptions import GlobalAssumptions, Section8ZipData
from dealcore.domain.property import UnitDetail

_ZIP_RE = re.compile(r"\b(\d{5})(?:-\d{4})?\b")


def extract_zip_code(address: str | None) -> str | None:
    """First 5-digit zip (ZIP+4 allowed) in a free-form address."""
    if not address:
        return None
    m = _ZIP_RE.search(address)
    return m.group(1) if m else None


def get_section8_rent(
    beds: int,
    zip_code: str,
    zip_data: Sequence[Section8ZipData],
) -> float | None:
    for z in zip_data:
        if z.zip_code == zip_code:
            # a zero payment standard means "not published"
            return z.rents.for_beds(beds) or None
    return None


def auto_populate_section8_rents(
    address: str | None,
    unit_details: Sequence[UnitDetail],
    assumptions: GlobalAssumptions,
) -> list[UnitDetail]:
    """
    Fill each unit's voucher rent from the zip-code payment standards.

    Units whose bedroom count has no published rent keep what they had;
    an address without a zip leaves every unit untouched.
    """
    zip_code = extract_zip_code(address)
    if zip_code is None:
        return list(unit_details)

    out: list[UnitDetail] = []
    for unit in unit_details:
        rent = get_section8_rent(unit.beds, zip_code, assumptions.section8_zip_data)
        out.append(unit.model_copy(update={"section8_rent": rent}) if rent else unit)
    return out
