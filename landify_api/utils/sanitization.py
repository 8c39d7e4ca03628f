"""HTML sanitization for business data interpolated into generated pages"""

import bleach


def escape_html(text) -> str:
    """Escape HTML entities; None becomes an empty string"""
    if text is None:
        return ""
    return bleach.clean(str(text), tags=[], attributes=[])


def safe_url(url) -> str:
    """Return the URL escaped for an href, or "" unless it is http(s)/tel/mailto"""
    if not url:
        return ""
    url = str(url).strip()
    if not url.lower().startswith(("http://", "https://", "tel:", "mailto:")):
        return ""
    return escape_html(url).replace('"', "&quot;")
