from __future__ import annotations

import pytest

from services.domain_utils import normalize_linkedin_profile_url, profile_key


@pytest.mark.parametrize("url", [
    "https://www.linkedin.com/in/JaneRoe/",
    "linkedin.com/in/janeroe/de",
    "https://de.linkedin.com/in/janeroe",
])
def test_linkedin_profile_urls_share_one_key(url):
    assert normalize_linkedin_profile_url(url) == "https://linkedin.com/in/janeroe"


@pytest.mark.parametrize("url", [
    "https://notlinkedin.com/in/janeroe",
    "https://linkedin.com.evil.example/in/janeroe",
    "https://www.linkedin.com/company/acme",
])
def test_non_profile_hosts_and_paths_are_not_canonicalized(url):
    assert normalize_linkedin_profile_url(url) is None


def test_profile_key_keeps_foreign_urls_verbatim():
    assert profile_key(" https://notlinkedin.com/in/janeroe ") == "https://notlinkedin.com/in/janeroe"
    assert profile_key("N/A") is None
    assert profile_key("") is None
