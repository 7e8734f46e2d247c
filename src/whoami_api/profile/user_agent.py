"""Coarse user-agent classification."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

UNKNOWN = "Unknown"
DESKTOP = "desktop"

# Order matters: Edge and Opera also advertise Chrome, Chrome advertises Safari.
_BROWSERS = (
    ("Edge", re.compile(r"Edg(?:e|A|iOS)?/([\d.]+)")),
    ("Opera", re.compile(r"(?:OPR|Opera)/([\d.]+)")),
    ("Samsung Internet", re.compile(r"SamsungBrowser/([\d.]+)")),
    ("Firefox", re.compile(r"(?:Firefox|FxiOS)/([\d.]+)")),
    ("Chromium", re.compile(r"Chromium/([\d.]+)")),
    ("Chrome", re.compile(r"(?:Chrome|CriOS)/([\d.]+)")),
    ("Safari", re.compile(r"Version/([\d.]+).*Safari/")),
    ("IE", re.compile(r"(?:MSIE |Trident/.*rv:)([\d.]+)")),
)

_OSES = (
    ("Windows", re.compile(r"Windows NT ([\d.]+)")),
    ("iOS", re.compile(r"(?:iPhone|iPad|iPod).*? OS ([\d_]+)")),
    ("Android", re.compile(r"Android ([\d.]+)")),
    ("Mac OS", re.compile(r"Mac OS X ([\d_.]+)")),
    ("Chrome OS", re.compile(r"CrOS \S+ ([\d.]+)")),
    ("Linux", re.compile(r"Linux()")),
)

_TABLET = re.compile(r"iPad|Tablet|Android(?!.*Mobile)", re.IGNORECASE)
_MOBILE = re.compile(r"Mobi|iPhone|iPod|Android.*Mobile|Windows Phone", re.IGNORECASE)
_CONSOLE = re.compile(r"PlayStation|Xbox|Nintendo", re.IGNORECASE)
_SMARTTV = re.compile(r"SmartTV|SMART-TV|Tizen|Web0S|HbbTV|AppleTV", re.IGNORECASE)
_WEARABLE = re.compile(r"Watch", re.IGNORECASE)


@dataclass(frozen=True)
class UserAgentInfo:
    browser_name: Optional[str] = None
    browser_version: Optional[str] = None
    os_name: Optional[str] = None
    os_version: Optional[str] = None
    device_type: Optional[str] = None

    @property
    def browser(self) -> str:
        return _label(self.browser_name, self.browser_version)

    @property
    def os(self) -> str:
        return _label(self.os_name, self.os_version)

    @property
    def device(self) -> str:
        return self.device_type or DESKTOP


def _label(name: Optional[str], version: Optional[str]) -> str:
    if not name:
        return UNKNOWN
    return f"{name} {version or ''}".strip()


def _match(table, ua: str) -> tuple[Optional[str], Optional[str]]:
    for name, pattern in table:
        found = pattern.search(ua)
        if found:
            version = found.group(1).replace("_", ".") if found.group(1) else None
            return name, version
    return None, None


def _device_type(ua: str) -> Optional[str]:
    # None means a regular desktop browser.
    if _CONSOLE.search(ua):
        return "console"
    if _SMARTTV.search(ua):
        return "smarttv"
    if _WEARABLE.search(ua):
        return "wearable"
    if _TABLET.search(ua):
        return "tablet"
    if _MOBILE.search(ua):
        return "mobile"
    return None


def describe_user_agent(ua: Optional[str]) -> UserAgentInfo:
    if not ua:
        return UserAgentInfo()
    browser_name, browser_version = _match(_BROWSERS, ua)
    os_name, os_version = _match(_OSES, ua)
    return UserAgentInfo(
        browser_name=browser_name,
        browser_version=browser_version,
        os_name=os_name,
        os_version=os_version,
        device_type=_device_type(ua),
    )
