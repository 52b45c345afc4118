"""
Risk scoring
Metadata, CSP, permission and JS library sub-scores over a manifest / scan result
"""

import logging

from .manifest_analyzer import find_csp
from .permission_risks import RISK_SCORES, risk_tier

logger = logging.getLogger(__name__)

NO_CSP_SCORE = 25
SELF_SOURCE = "'self'"

SEVERITY_SCORES = {
    'low': 10,
    'medium': 20,
    'high': 30,
    'critical': 40,
}


def _as_list(value):
    if value is None:
        return []
    return list(value) if isinstance(value, list) else [value]


def analyze_metadata(manifest):
    """One point for each missing piece of publisher metadata (max 4)"""
    score = 0

    if not manifest.get('author'):
        score += 1

    developer = manifest.get('developer')
    if not isinstance(developer, dict) or not developer.get('email'):
        score += 1

    if not manifest.get('privacy_policy'):
        score += 1

    if not manifest.get('homepage_url'):
        score += 1

    return score


def analyze_csp(manifest):
    """
    Score the content security policy

    A missing policy costs 25 points. Otherwise every source token other
    than 'self' costs one point and is listed under its directive.

    Returns:
        tuple: (score, csp_details)
    """
    score = 0
    csp_details = {}
    csp = find_csp(manifest)

    if not csp:
        score += NO_CSP_SCORE
        csp_details['noCSP'] = 'NO CSP DEFINED'
        return score, csp_details

    for policy in csp.split(';'):
        parts = policy.split()
        if not parts:
            continue
        directive, sources = parts[0], parts[1:]
        for source in sources:
            if source != SELF_SOURCE:
                score += 1
                csp_details.setdefault(directive, []).append(source)

    return score, csp_details


def analyze_permissions(manifest):
    """
    Score permissions and optional permissions against the risk table

    Repeated entries are not deduplicated: each one adds its points, and
    the detail message for a repeated permission is simply rewritten.

    Returns:
        tuple: (score, permissions_details)
    """
    score = 0
    permissions_details = {}

    permissions = _as_list(manifest.get('permissions')) + _as_list(manifest.get('optional_permissions'))

    for permission in permissions:
        tier = risk_tier(permission)
        score += RISK_SCORES[tier]

        if tier != 'least':
            permissions_details[permission] = f"Permission '{permission}' classified as {tier} risk."

    return score, permissions_details


def determine_vulnerability_score(vulnerability):
    """Points for one vulnerability record; unknown severities score 0"""
    severity = vulnerability.get('severity')
    if not isinstance(severity, str):
        return 0
    return SEVERITY_SCORES.get(severity.lower(), 0)


def calculate_js_libraries_score(scan_results):
    """
    Aggregate a retire.js style scan into a score and per-finding details

    Details are keyed ``<component>-vuln-<index>`` where index is the
    position in that library's vulnerability list. Two scan entries for the
    same component share keys, so the later record replaces the earlier
    one in the details while both still count towards the score.

    Args:
        scan_results (list): ``data`` entries of the scanner output

    Returns:
        tuple: (score, js_libraries_details)
    """
    score = 0
    js_libraries_details = {}

    for file_result in scan_results or []:
        if not isinstance(file_result, dict):
            continue
        for library in file_result.get('results') or []:
            if not isinstance(library, dict):
                continue
            component = library.get('component')
            for index, vulnerability in enumerate(library.get('vulnerabilities') or []):
                if not isinstance(vulnerability, dict):
                    continue
                score += determine_vulnerability_score(vulnerability)

                vuln_key = f"{component}-vuln-{index}"
                if vuln_key in js_libraries_details:
                    logger.debug("Vulnerability detail key %s reused", vuln_key)

                severity = vulnerability.get('severity')
                info = vulnerability.get('info')
                identifiers = vulnerability.get('identifiers')
                if not isinstance(identifiers, dict):
                    identifiers = {}
                js_libraries_details[vuln_key] = {
                    'component': component,
                    'severity': severity.lower() if isinstance(severity, str) else None,
                    'info': ", ".join(str(item) for item in info) if isinstance(info, list) else None,
                    'summary': identifiers.get('summary'),
                    'CVE': ", ".join(str(cve) for cve in identifiers.get('CVE') or []),
                }

    return score, js_libraries_details
