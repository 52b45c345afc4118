import pytest

from extension_risk.errors import InvalidInputError
from extension_risk.identifiers import get_extension_id

EXTENSION_ID = "cjpalhdlnbpafiamejdnhcphjbkeiagm"


def test_bare_id():
    assert get_extension_id(EXTENSION_ID) == EXTENSION_ID


def test_bare_id_is_stripped():
    assert get_extension_id(f"  {EXTENSION_ID}\n") == EXTENSION_ID


def test_id_case_is_preserved():
    assert get_extension_id(EXTENSION_ID.upper()) == EXTENSION_ID.upper()
    url = f"https://chromewebstore.google.com/detail/ublock-origin/{EXTENSION_ID.upper()}"
    assert get_extension_id(url) == EXTENSION_ID.upper()


@pytest.mark.parametrize("url", [
    f"https://chromewebstore.google.com/detail/ublock-origin/{EXTENSION_ID}",
    f"http://chromewebstore.google.com/detail/ublock_origin/{EXTENSION_ID}/",
    f"https://chromewebstore.google.com/detail/ublock-origin/{EXTENSION_ID}?hl=en",
    f"https://chrome.google.com/webstore/detail/ublock-origin/{EXTENSION_ID}",
])
def test_store_urls(url):
    assert get_extension_id(url) == EXTENSION_ID


@pytest.mark.parametrize("value", [
    f"https://evil.example.com/detail/ublock-origin/{EXTENSION_ID}",
    "https://chromewebstore.google.com/category/extensions",
    "not an id",
    "abc;rm -rf /",
    "",
    None,
])
def test_rejected_input(value):
    with pytest.raises(InvalidInputError):
        get_extension_id(value)
