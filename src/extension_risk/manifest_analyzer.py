"""
Manifest Analyzer
Extracts structural and policy facts from a parsed manifest.json
"""

CSP_KEY = "content_security_policy"

OVERRIDE_KEYS = ("chrome_url_overrides", "chrome_settings_overrides")
CHROME_OS_KEYS = ("file_browser_handlers", "input_components")


def _children(node):
    """(key, value) pairs of a container node, in document order"""
    if isinstance(node, dict):
        return node.items()
    if isinstance(node, list):
        return ((str(index), value) for index, value in enumerate(node))
    return ()


def find_csp(node):
    """
    Locate the content security policy anywhere in the manifest

    Depth-first over objects and arrays in document key order. Key matching
    is case-insensitive. When a matching key holds a string it is returned
    immediately; when it holds a container, the search descends into it and
    that result is returned as-is, even if it is None. Any other matching
    value (number, bool) is skipped and the walk continues. The first hit
    ends the search.

    MV3 manifests keep policies under e.g. ``extension_pages``, which is not
    itself a CSP key, so such an object yields None.

    Args:
        node: Manifest (sub)tree

    Returns:
        str or None
    """
    for key, value in _children(node):
        if key.lower() == CSP_KEY:
            if isinstance(value, str):
                return value
            if value is None or isinstance(value, (dict, list)):
                return find_csp(value)
        elif isinstance(value, (dict, list)):
            result = find_csp(value)
            if result:
                return result
    return None


def _as_list(value):
    if value is None:
        return []
    if isinstance(value, list):
        return list(value)
    return [value]


def analyze_manifest(manifest):
    """
    Collect manifest facts relevant to a security review

    Args:
        manifest (dict): Parsed manifest.json

    Returns:
        dict: Structural facts; absent fields use empty/None/False sentinels
    """
    analysis = {
        'cspAnalysis': {},
        'backgroundScripts': [],
        'contentScriptsDomains': [],
        'webAccessibleResources': [],
        'externallyConnectable': [],
        'updateUrl': None,
        'oauth2': False,
        'specificOverrides': [],
        'developerInfo': {},
        'chromeOsKeys': [],
        'versionInfo': {},
    }

    csp = manifest.get(CSP_KEY)
    if csp:
        analysis['cspAnalysis'] = {'present': True, 'policy': csp}
    else:
        analysis['cspAnalysis'] = {'present': False, 'warning': 'No CSP defined.'}

    # Background scripts and service worker
    background = manifest.get('background')
    if isinstance(background, dict):
        analysis['backgroundScripts'] = _as_list(background.get('scripts'))
        if background.get('service_worker'):
            analysis['backgroundScripts'].append(background['service_worker'])

    for script in _as_list(manifest.get('content_scripts')):
        if isinstance(script, dict):
            analysis['contentScriptsDomains'].extend(_as_list(script.get('matches')))

    if manifest.get('web_accessible_resources'):
        analysis['webAccessibleResources'] = manifest['web_accessible_resources']

    connectable = manifest.get('externally_connectable')
    if isinstance(connectable, dict):
        analysis['externallyConnectable'] = _as_list(connectable.get('matches'))

    if manifest.get('update_url'):
        analysis['updateUrl'] = manifest['update_url']

    if manifest.get('oauth2'):
        analysis['oauth2'] = True

    analysis['specificOverrides'] = [key for key in OVERRIDE_KEYS if manifest.get(key)]

    if manifest.get('author'):
        analysis['developerInfo']['author'] = manifest['author']
    developer = manifest.get('developer')
    if isinstance(developer, dict) and developer:
        analysis['developerInfo']['developer'] = developer

    analysis['chromeOsKeys'] = [key for key in CHROME_OS_KEYS if manifest.get(key)]

    analysis['versionInfo'] = {
        'version': manifest.get('version'),
        'minChromeVersion': manifest.get('minimum_chrome_version') or 'Not specified',
    }

    return analysis
