"""User-agent classification.

Pure, side-effect-free substring matching. The result is display
metadata only; fingerprinting and admission never depend on it.
"""

from typing import Tuple

from sharewatch.common.constants import DeviceConstants
from sharewatch.data.schemas.device import DeviceInfo

# First match wins. Edge carries "chrome" and Chrome carries "safari",
# so the more specific tokens come first.
BROWSER_TABLE: Tuple[Tuple[Tuple[str, ...], str], ...] = (
    (("edg",), "Edge"),
    (("chrome",), "Chrome"),
    (("firefox",), "Firefox"),
    (("safari",), "Safari"),
)

# Android carries "linux" and iOS carries "mac os x".
OS_TABLE: Tuple[Tuple[Tuple[str, ...], str], ...] = (
    (("windows",), "Windows"),
    (("android",), "Android"),
    (("iphone", "ipad", "ipod", "ios"), "iOS"),
    (("mac",), "macOS"),
    (("linux",), "Linux"),
)

# iPad user agents also carry "mobile".
DEVICE_TYPE_TABLE: Tuple[Tuple[Tuple[str, ...], str], ...] = (
    (("tablet", "ipad"), "tablet"),
    (("mobile", "iphone"), "mobile"),
)


def _match(ua: str, table, default: str) -> str:
    for needles, label in table:
        if any(needle in ua for needle in needles):
            return label
    return default


def parse_user_agent(user_agent: str) -> DeviceInfo:
    """Classify a user-agent string into browser, OS and device type.

    Args:
        user_agent: Raw User-Agent header (may be empty)

    Returns:
        DeviceInfo with "Unknown" / "desktop" for anything unmatched
    """
    ua = (user_agent or "").lower()

    browser = _match(ua, BROWSER_TABLE, DeviceConstants.UNKNOWN)
    os_name = _match(ua, OS_TABLE, DeviceConstants.UNKNOWN)
    device_type = _match(ua, DEVICE_TYPE_TABLE, DeviceConstants.DEFAULT_DEVICE_TYPE)

    return DeviceInfo(
        browser=browser,
        os=os_name,
        device_type=device_type,
        device_name=f"{os_name} - {browser}",
    )
