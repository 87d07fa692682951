"""Great-circle distance.

Haversine over a spherical Earth (R = 6371 km). Accepts scalars or
array-likes so callers can score a whole history at once.
"""

from typing import Union

import numpy as np

from sharewatch.common.constants import GeoConstants

ArrayLike = Union[float, np.ndarray]


def haversine_km(
    lat1: ArrayLike,
    lon1: ArrayLike,
    lat2: ArrayLike,
    lon2: ArrayLike,
    radius_km: float = GeoConstants.EARTH_RADIUS_KM,
) -> ArrayLike:
    """Distance in kilometres between (lat1, lon1) and (lat2, lon2).

    Returns:
        float for scalar input, ndarray for array input
    """
    phi1 = np.radians(lat1)
    phi2 = np.radians(lat2)
    d_phi = np.radians(np.subtract(lat2, lat1))
    d_lambda = np.radians(np.subtract(lon2, lon1))

    a = np.sin(d_phi / 2) ** 2 + np.cos(phi1) * np.cos(phi2) * np.sin(d_lambda / 2) ** 2
    # Rounding can push a past 1.0 for near-antipodal points
    a = np.clip(a, 0.0, 1.0)
    c = 2 * np.arctan2(np.sqrt(a), np.sqrt(1 - a))
    distance = radius_km * c

    if np.ndim(distance) == 0:
        return float(distance)
    return distance


def valid_coordinates(latitude: float, longitude: float) -> bool:
    """Finite and within WGS84 bounds."""
    if latitude is None or longitude is None:
        return False
    return (
        bool(np.isfinite(latitude))
        and bool(np.isfinite(longitude))
        and -90.0 <= latitude <= 90.0
        and -180.0 <= longitude <= 180.0
    )
