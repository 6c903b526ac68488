"""
Reading Value Object
====================
Immutable record of one ingested counter sample.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Mapping

from app.constants import Defaults


@dataclass(frozen=True)
class Reading:
    """
    One row of the ``readings`` table.

    Telemetry fields are kept as the text the device sent; numeric coercion
    only happens when readings are aggregated. ``id`` is ``None`` until the
    store assigns one, and it is the only reliable recency order.
    """

    timestamp: str
    device_id: str = Defaults.DEVICE_ID
    cpm: str = Defaults.CPM
    acpm: str = Defaults.ACPM
    usv: str = Defaults.USV
    dose: str = Defaults.DOSE
    raw_data: str = Defaults.RAW_DATA
    client_ip: str = Defaults.CLIENT_IP
    id: int | None = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Reading":
        """Build a Reading from a ``sqlite3.Row`` (or any mapping)."""
        keys = set(row.keys())
        return cls(
            id=int(row["id"]) if "id" in keys and row["id"] is not None else None,
            timestamp=str(row["timestamp"]),
            device_id=str(row["device_id"]),
            cpm=str(row["cpm"]),
            acpm=str(row["acpm"]),
            usv=str(row["usv"]),
            dose=str(row["dose"]),
            raw_data=str(row["raw_data"]),
            client_ip=str(row["client_ip"]) if "client_ip" in keys else "",
        )

    def with_id(self, reading_id: int) -> "Reading":
        return replace(self, id=reading_id)

    def export_fields(self) -> tuple[str, str, str, str, str, str, str]:
        """Values in export column order (Timestamp .. RawData)."""
        return (
            self.timestamp,
            self.device_id,
            self.cpm,
            self.acpm,
            self.usv,
            self.dose,
            self.raw_data,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "timestamp": self.timestamp,
            "device_id": self.device_id,
            "cpm": self.cpm,
            "acpm": self.acpm,
            "usv": self.usv,
            "dose": self.dose,
            "raw_data": self.raw_data,
            "client_ip": self.client_ip,
        }
