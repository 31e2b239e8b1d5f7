"""
Anomaly detector reference.

Only the detector name is serialised; the anomaly records are a client side
accumulator and are never sent or read.
"""

import sys
from typing import Any

import structlog

from .models import AnomalyRecord

logger = structlog.get_logger(__name__)

TYPE = "detector"
NAME = "name"
RECORDS = "records"


class Detector:
    """A named detector with the anomaly records collected for it"""

    def __init__(self, name: str | None = None):
        self._name: str | None = None
        self._records: list[AnomalyRecord] = []
        if name is not None:
            self.name = name

    @classmethod
    def from_dict(cls, values: dict[str, Any]) -> "Detector":
        """Create the detector from a map. Only the name field is read.

        A map without a name gives a nameless detector rather than an error.
        """
        detector = cls()
        if NAME in values:
            detector.name = str(values[NAME])
        else:
            logger.warning("Constructing detector from map with no name field", keys=list(values))
        return detector

    @property
    def name(self) -> str | None:
        return self._name

    @name.setter
    def name(self, value: str) -> None:
        # many detectors share the same few configured names
        self._name = sys.intern(value)

    @property
    def records(self) -> list[AnomalyRecord]:
        """The live record list, not a copy"""
        return self._records

    def add_record(self, record: AnomalyRecord) -> None:
        self._records.append(record)

    def to_dict(self) -> dict[str, Any]:
        return {NAME: self._name} if self._name is not None else {}

    def __repr__(self) -> str:
        return f"Detector(name={self._name!r}, records={len(self._records)})"
