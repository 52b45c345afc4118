"""
Risk report assembly
Combines the sub-scores and analysis details into the final report
"""


def build_report(manifest, metadata_score, csp_result, permissions_result,
                 js_libraries_result, manifest_analysis, source_usage, lint_summary):
    """
    Compose the scored report

    Only the metadata, CSP, permissions and JS library scores make up
    totalRiskScore. The chrome API file count and lint issue count are
    reported in the breakdown but never added to the total.

    Args:
        manifest (dict): Parsed manifest.json
        metadata_score (int): analyze_metadata result
        csp_result (tuple): (score, details) from analyze_csp
        permissions_result (tuple): (score, details) from analyze_permissions
        js_libraries_result (tuple): (score, details) from calculate_js_libraries_score
        manifest_analysis (dict): analyze_manifest result
        source_usage (dict): scan_sources result
        lint_summary (dict): summarize_lint_results result

    Returns:
        dict: JSON-serialisable report
    """
    csp_score, csp_details = csp_result
    permissions_score, permissions_details = permissions_result
    js_libraries_score, js_libraries_details = js_libraries_result

    chrome_api_usage = source_usage.get('chromeAPIUsage', {})

    return {
        'name': manifest.get('name') or 'No name specified',
        'version': manifest.get('version') or 'No version specified',
        'description': manifest.get('description') or 'No description specified',
        'totalRiskScore': metadata_score + csp_score + permissions_score + js_libraries_score,
        'breakdown': {
            'metadataScore': metadata_score,
            'cspScore': csp_score,
            'permissionsScore': permissions_score,
            'jsLibrariesScore': js_libraries_score,
            'chromeAPIUsage': len(chrome_api_usage),
            'eslintIssues': lint_summary.get('totalIssues', 0),
        },
        'details': {
            'manifestAnalysis': manifest_analysis,
            'cspDetails': csp_details,
            'permissionsDetails': permissions_details,
            'jsLibrariesDetails': js_libraries_details,
            'chromeAPIUsage': chrome_api_usage,
            'dataHandling': source_usage.get('dataHandling', {}),
            'lintDetails': lint_summary,
        },
    }
