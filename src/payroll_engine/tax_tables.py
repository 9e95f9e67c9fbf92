from __future__ import annotations

import json
from dataclasses import dataclass
from decimal import Decimal
from pathlib import Path
from typing import List, Optional, Tuple

from .exceptions import TaxTableError, ValidationError
from .money import to_decimal

DEFAULT_TABLE_DIR = Path(__file__).resolve().parent / "data" / "tax_tables"
DEFAULT_TABLE_VERSION = "ng_pita_2011"


@dataclass(frozen=True)
class TaxBand:
    width: Optional[Decimal]  # None for the open-ended top band
    rate: Decimal


@dataclass(frozen=True)
class ReliefRule:
    """Consolidated relief: max(fixed_floor, floor_rate * gross) + gross_rate * gross."""

    fixed_floor: Decimal
    floor_rate: Decimal
    gross_rate: Decimal


@dataclass(frozen=True)
class StatutoryRates:
    pension_rate: Decimal
    nhf_rate: Decimal


class TaxTable:
    def __init__(
        self,
        version: str,
        bands: List[TaxBand],
        relief: ReliefRule,
        statutory: StatutoryRates,
        currency: str = "NGN",
    ):
        self.version = version
        self.bands: Tuple[TaxBand, ...] = tuple(bands)
        self.relief = relief
        self.statutory = statutory
        self.currency = currency
        self._validate()

    def _validate(self) -> None:
        if not self.bands:
            raise TaxTableError(f"Tax table {self.version} has no bands")
        for index, band in enumerate(self.bands):
            if band.width is None and index != len(self.bands) - 1:
                raise TaxTableError(f"Only the last band of {self.version} may be open-ended")
            if band.width is not None and band.width <= 0:
                raise TaxTableError(f"Band widths in {self.version} must be positive")
            if not Decimal("0") <= band.rate <= Decimal("1"):
                raise TaxTableError(f"Band rate {band.rate} in {self.version} is outside [0, 1]")
        for name in ("pension_rate", "nhf_rate"):
            rate = getattr(self.statutory, name)
            if not Decimal("0") <= rate <= Decimal("1"):
                raise TaxTableError(f"{name} {rate} in {self.version} is outside [0, 1]")

    def thresholds(self) -> List[Tuple[Decimal, Optional[Decimal], Decimal]]:
        """Cumulative (lower, upper, rate) triples for each band."""

        rows = []
        lower = Decimal("0")
        for band in self.bands:
            upper = None if band.width is None else lower + band.width
            rows.append((lower, upper, band.rate))
            if upper is not None:
                lower = upper
        return rows

    @classmethod
    def from_dict(cls, data: dict) -> "TaxTable":
        try:
            bands = [
                TaxBand(
                    width=None if row.get("width") is None else to_decimal(row["width"]),
                    rate=to_decimal(row["rate"]),
                )
                for row in data["bands"]
            ]
            relief = data["relief"]
            statutory = data["statutory"]
            return cls(
                version=data["version"],
                bands=bands,
                relief=ReliefRule(
                    fixed_floor=to_decimal(relief["fixed_floor"]),
                    floor_rate=to_decimal(relief["floor_rate"]),
                    gross_rate=to_decimal(relief["gross_rate"]),
                ),
                statutory=StatutoryRates(
                    pension_rate=to_decimal(statutory["pension_rate"]),
                    nhf_rate=to_decimal(statutory["nhf_rate"]),
                ),
                currency=data.get("currency", "NGN"),
            )
        except KeyError as exc:
            raise TaxTableError(f"Tax table is missing field {exc}") from exc
        except ValidationError as exc:
            version = data.get("version", "<unknown>")
            raise TaxTableError(f"Tax table {version} has a non-numeric value: {exc}") from exc


class TaxTableRepository:
    def __init__(self, base_path: Path = DEFAULT_TABLE_DIR):
        self.base_path = base_path

    def available_versions(self) -> List[str]:
        return sorted([p.stem for p in self.base_path.glob("*.json")])

    def load(self, version: str = DEFAULT_TABLE_VERSION) -> TaxTable:
        file_path = self.base_path / f"{version}.json"
        if not file_path.exists():
            raise TaxTableError(f"Tax table version {version} not found at {file_path}")
        with file_path.open("r", encoding="utf-8") as handle:
            data = json.load(handle, parse_float=Decimal)
        return TaxTable.from_dict(data)
