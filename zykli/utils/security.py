from urllib.parse import urlparse

from ..exceptions import ValidationError

# Keywords and domains refused by the shortener.
BAD_KEYWORDS = [
    "phishing", "malware", "crypto-giveaway",
]

BAD_DOMAINS = [
    "malicious-site.com",
    "example-phishing.com",
]

ALLOWED_SCHEMES = ("http", "https")
MAX_URL_LENGTH = 2048


def is_unsafe_url(url: str) -> tuple[bool, str | None]:
    """
    Checks if a URL is unsafe based on a local blocklist of keywords and domains.

    Returns:
        tuple[bool, str | None]: (is_unsafe, reason)
    """
    if not url:
        return False, None

    url_lower = url.lower()

    for keyword in BAD_KEYWORDS:
        if keyword in url_lower:
            return True, f"URL contains possibly inappropriate content: '{keyword}'"

    domain = (urlparse(url).hostname or "").lower()
    for bad_domain in BAD_DOMAINS:
        if domain == bad_domain or domain.endswith("." + bad_domain):
            return True, f"Domain '{domain}' is blocked."

    return False, None


def normalize_url(raw_url) -> str:
    """Validate a user-supplied long URL, defaulting the scheme to https."""
    if not isinstance(raw_url, str) or not raw_url.strip():
        raise ValidationError("url is required")

    url = raw_url.strip()
    if len(url) > MAX_URL_LENGTH:
        raise ValidationError(f"url must be at most {MAX_URL_LENGTH} characters")

    if "://" not in url:
        url = "https://" + url

    parsed = urlparse(url)
    if parsed.scheme.lower() not in ALLOWED_SCHEMES or not parsed.netloc:
        raise ValidationError("url must be a valid http(s) address")

    unsafe, reason = is_unsafe_url(url)
    if unsafe:
        raise ValidationError(reason)

    return url
