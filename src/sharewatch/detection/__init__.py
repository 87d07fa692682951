"""Fraud detectors - impossible travel and login patterns."""

from sharewatch.detection.geo import haversine_km, valid_coordinates
from sharewatch.detection.impossible_travel import ImpossibleTravelDetector
from sharewatch.detection.patterns import LoginPatternAnalyzer
from sharewatch.detection.schema import PatternAnalysis, TravelCheck

__all__ = [
    "haversine_km",
    "valid_coordinates",
    "ImpossibleTravelDetector",
    "LoginPatternAnalyzer",
    "PatternAnalysis",
    "TravelCheck",
]
