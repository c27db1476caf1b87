from __future__ import annotations

import unicodedata
from typing import Optional
from urllib.parse import unquote, urlparse

import tldextract


# Bundled public-suffix snapshot only; never fetch the list over the network
_EXTRACT = tldextract.TLDExtract(suffix_list_urls=())


def extract_apex_domain(url_or_domain: Optional[str]) -> Optional[str]:
    if not url_or_domain:
        return None
    text = str(url_or_domain).strip().lower()
    if not text:
        return None
    if not text.startswith('http://') and not text.startswith('https://'):
        text = f"http://{text}"
    ext = _EXTRACT(text)
    if ext.domain and ext.suffix:
        return f"{ext.domain}.{ext.suffix}"
    return None


def normalize_linkedin_profile_url(url: Optional[str]) -> Optional[str]:
    """Canonical ``https://linkedin.com/in/<slug>`` form, or None for non-profile URLs."""
    if not url:
        return None
    text = str(url).strip()
    if not text:
        return None
    if '://' not in text:
        text = f"https://{text}"
    u = urlparse(text)
    host = (u.netloc or '').lower()
    if host.startswith('www.'):
        host = host[4:]
    path = (u.path or '').rstrip('/')
    if not (host == 'linkedin.com' or host.endswith('.linkedin.com')) or not path.startswith('/in/'):
        return None
    # Keep only /in/{slug} and drop trailing locale/segments (e.g., /de, /en)
    parts = [p for p in path.split('/') if p]
    if len(parts) < 2:
        return None
    slug = unicodedata.normalize('NFKC', unquote(parts[1])).strip().lower()
    # Remove invisible characters occasionally present
    slug = slug.replace('\u200b', '').replace('\u200c', '').replace('\u200d', '')
    if not slug:
        return None
    return f"https://linkedin.com/in/{slug}"


def profile_key(url: Optional[str]) -> Optional[str]:
    """Employee identity key: canonical LinkedIn URL, else the trimmed raw value."""
    canonical = normalize_linkedin_profile_url(url)
    if canonical:
        return canonical
    text = (url or '').strip()
    # Search results use 'N/A' for unknown URLs
    if not text or text.upper() == 'N/A':
        return None
    return text
