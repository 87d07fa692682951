"""Centralized constants for ShareWatch."""


# ===== DEVICE ADMISSION =====
class DeviceConstants:
    MAX_DEVICES_PER_USER = 3
    DEFAULT_DEVICE_TYPE = "desktop"
    UNKNOWN = "Unknown"
    FINGERPRINT_SEPARATOR = "||"
    FINGERPRINT_HASH_ALGORITHM = "sha256"


# ===== GEO & TRAVEL =====
class GeoConstants:
    EARTH_RADIUS_KM = 6371.0
    IMPOSSIBLE_TRAVEL_KMH = 800.0  # sustained commercial-flight speed
    TRAVEL_LOOKBACK_HOURS = 24
    TRAVEL_HISTORY_LIMIT = 5


# ===== LOGIN PATTERNS =====
class PatternConstants:
    WINDOW_DAYS = 7
    MIN_EVENTS = 3
    LOCATION_DIVERSITY_THRESHOLD = 3
    SIMULTANEOUS_WINDOW_MINUTES = 30
    LOCATION_WEIGHT = 20
    DEVICE_WEIGHT = 30
    SIMULTANEOUS_WEIGHT = 40
    SUSPICIOUS_THRESHOLD = 50
    DISPLAY_MAX = 100


# ===== DATA & QUERY LIMITS =====
class DataConstants:
    PENDING_FLAGS_LIMIT = 50
    DEVICE_LIMIT_FAILURE_REASON = "device_limit"
