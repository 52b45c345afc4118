"""
Permission risk table
Static mapping from permission / host pattern to a risk tier
"""

from types import MappingProxyType

RISK_SCORES = MappingProxyType({
    'least': 0,     # No risk or negligible risk
    'low': 1,
    'medium': 2,
    'high': 3,
    'critical': 4,  # Extremely high risk
})

DEFAULT_TIER = 'least'

_TIERS = {
    'least': [
        'alarms', 'contextMenus', 'enterprise.deviceAttributes', 'fileBrowserHandler',
        'fontSettings', 'gcm', 'idle', 'power', 'system.cpu', 'system.display',
        'system.memory', 'tts', 'unlimitedStorage', 'wallpaper',
        'externally_connectable', 'mediaGalleries',
    ],
    'low': [
        'printerProvider', 'certificateProvider', 'documentScan',
        'enterprise.platformKeys', 'hid', 'identity', 'networking.config',
        'notifications', 'platformKeys', 'usbDevices', 'webRequestBlocking',
        'overrideEscFullscreen',
    ],
    'medium': [
        'activeTab', 'background', 'bookmarks', 'clipboardWrite', 'downloads',
        'fileSystemProvider', 'management', 'nativeMessaging', 'geolocation',
        'processes', 'signedInDevices', 'storage', 'system.storage', 'tabs',
        'topSites', 'ttsEngine', 'webNavigation', 'syncFileSystem', 'fileSystem',
    ],
    'high': [
        'clipboardRead', 'contentSettings', 'desktopCapture', 'displaySource',
        'dns', 'experimental', 'history', 'http://*/*', 'https://*/*', 'file:///*',
        'http://*/', 'https://*/', 'mdns', 'pageCapture', 'privacy', 'proxy',
        'vpnProvider', 'browsingData', 'audioCapture', 'videoCapture',
    ],
    'critical': [
        'cookies', 'debugger', 'declarativeWebRequest', 'webRequest',
        '<all_urls>', '*://*/*', '*://*/', 'content_security_policy',
        'declarativeNetRequest', 'copresence', 'usb', 'unsafe-eval',
        'web_accessible_resources',
    ],
}

PERMISSION_RISK_LEVELS = MappingProxyType({
    permission: tier
    for tier, permissions in _TIERS.items()
    for permission in permissions
})


def risk_tier(permission):
    """Tier of a permission string; unknown (or non-string) entries are 'least'"""
    if not isinstance(permission, str):
        return DEFAULT_TIER
    return PERMISSION_RISK_LEVELS.get(permission, DEFAULT_TIER)
