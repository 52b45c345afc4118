"""
Source pattern scanner
Lexical detection of data-handling APIs and chrome.* API usage in script files
"""

import re

# Category -> pattern; counted per file
DATA_HANDLING_PATTERNS = {
    'apiCalls': re.compile(r'fetch\(|axios\.|XMLHttpRequest'),
    'localStorage': re.compile(r'localStorage\.'),
    'sessionStorage': re.compile(r'sessionStorage\.'),
    'indexedDB': re.compile(r'indexedDB\.open'),
    'webSQL': re.compile(r'openDatabase\('),
    'cookies': re.compile(r'document\.cookie'),
    'fileAPI': re.compile(r'FileReader\('),
    'webWorkers': re.compile(r'new Worker\('),
    'cryptoAPI': re.compile(r'crypto\.subtle\.'),
    'dynamicEval': re.compile(r'eval\(|new Function\('),
}

# chrome.<namespace> optionally followed by one member, e.g. chrome.storage.local
CHROME_API_PATTERN = re.compile(r'chrome\.\w+(?:\.\w+)?', re.ASCII)


def analyze_data_handling(file_contents):
    """
    Count data-handling pattern hits per file

    Args:
        file_contents (dict): Relative path -> script text

    Returns:
        dict: path -> {category: count}; files and categories without hits are omitted
    """
    data_handling_usage = {}

    for file_name, content in file_contents.items():
        counts = {}
        for category, pattern in DATA_HANDLING_PATTERNS.items():
            matches = pattern.findall(content)
            if matches:
                counts[category] = len(matches)
        if counts:
            data_handling_usage[file_name] = counts

    return data_handling_usage


def analyze_chrome_api_usage(file_contents):
    """
    Unique chrome.* API signatures per file, in first-seen order

    Returns:
        dict: path -> list of signatures; files without usage are omitted
    """
    chrome_api_usage = {}

    for file_name, content in file_contents.items():
        # order-preserving dedupe
        apis = list(dict.fromkeys(CHROME_API_PATTERN.findall(content)))
        if apis:
            chrome_api_usage[file_name] = apis

    return chrome_api_usage


def scan_sources(file_contents):
    """Run both scanners over a file set"""
    return {
        'chromeAPIUsage': analyze_chrome_api_usage(file_contents),
        'dataHandling': analyze_data_handling(file_contents),
    }
