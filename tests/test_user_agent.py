"""Tests for user-agent classification."""

from whoami_api.profile.user_agent import describe_user_agent

CHROME_WINDOWS = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.6099.109 Safari/537.36"
)
EDGE_WINDOWS = CHROME_WINDOWS + " Edg/120.0.2210.77"
SAFARI_IPHONE = (
    "Mozilla/5.0 (iPhone; CPU iPhone OS 17_1_2 like Mac OS X) AppleWebKit/605.1.15 "
    "(KHTML, like Gecko) Version/17.1.2 Mobile/15E148 Safari/604.1"
)
SAFARI_IPAD = (
    "Mozilla/5.0 (iPad; CPU OS 16_5 like Mac OS X) AppleWebKit/605.1.15 "
    "(KHTML, like Gecko) Version/16.5 Mobile/15E148 Safari/604.1"
)
FIREFOX_LINUX = "Mozilla/5.0 (X11; Ubuntu; Linux x86_64; rv:121.0) Gecko/20100101 Firefox/121.0"
CHROME_ANDROID = (
    "Mozilla/5.0 (Linux; Android 14; Pixel 8) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.6099.144 Mobile Safari/537.36"
)


class TestDescribeUserAgent:
    def test_chrome_on_windows_desktop(self):
        info = describe_user_agent(CHROME_WINDOWS)
        assert info.browser == "Chrome 120.0.6099.109"
        assert info.os == "Windows 10.0"
        assert info.device == "desktop"

    def test_edge_wins_over_chrome(self):
        assert describe_user_agent(EDGE_WINDOWS).browser_name == "Edge"

    def test_safari_on_iphone(self):
        info = describe_user_agent(SAFARI_IPHONE)
        assert info.browser == "Safari 17.1.2"
        assert info.os == "iOS 17.1.2"
        assert info.device == "mobile"

    def test_ipad_is_tablet(self):
        info = describe_user_agent(SAFARI_IPAD)
        assert info.os == "iOS 16.5"
        assert info.device == "tablet"

    def test_firefox_on_linux_has_no_os_version(self):
        info = describe_user_agent(FIREFOX_LINUX)
        assert info.browser == "Firefox 121.0"
        assert info.os == "Linux"

    def test_android_phone(self):
        info = describe_user_agent(CHROME_ANDROID)
        assert info.os == "Android 14"
        assert info.device == "mobile"

    def test_missing_user_agent(self):
        info = describe_user_agent(None)
        assert (info.browser, info.os, info.device) == ("Unknown", "Unknown", "desktop")

    def test_unrecognised_user_agent(self):
        info = describe_user_agent("curl/8.4.0")
        assert info.browser == "Unknown"
        assert info.device == "desktop"
