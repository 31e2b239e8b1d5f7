"""
Anomaly result records produced by the analysis engine.
"""

from dataclasses import asdict, dataclass
from typing import Optional


@dataclass
class AnomalyRecord:
    """A single anomalous value reported for a detector"""

    timestamp: str
    detector_name: str
    anomaly_score: float
    probability: float
    actual: Optional[float] = None
    typical: Optional[float] = None
    field_name: Optional[str] = None
    function: Optional[str] = None
    by_field_name: Optional[str] = None
    by_field_value: Optional[str] = None

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization"""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "AnomalyRecord":
        """Create from dictionary"""
        return cls(**data)

    @property
    def severity(self) -> str:
        return AnomalyRecord.calculate_severity(self.anomaly_score)

    @staticmethod
    def calculate_severity(score: float) -> str:
        """Calculate severity level from a 0-100 anomaly score"""
        if score >= 75:
            return "critical"
        elif score >= 50:
            return "major"
        elif score >= 25:
            return "minor"
        else:
            return "warning"
