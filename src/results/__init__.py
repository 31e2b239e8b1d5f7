"""
Analysis results: detectors and the anomaly records reported for them.
"""

from .detector import Detector
from .models import AnomalyRecord

__all__ = ["Detector", "AnomalyRecord"]
