"""
Domain name rules - sanitizing, format checks and suggestions.

Labels follow DNS conventions: lowercase letters, digits and hyphens,
3 to 63 characters, no leading/trailing hyphen, no consecutive hyphens.
"""

import re

MIN_DOMAIN_LENGTH = 3
MAX_DOMAIN_LENGTH = 63

_LABEL_CHARSET = re.compile(r"^[a-z0-9-]+$")


def full_domain_name(domain: str, suffix: str) -> str:
    """Append the root suffix to a domain label."""
    return f"{domain}.{suffix}"


def sanitize_domain_name(name: str) -> str:
    """
    Coerce an arbitrary string (e.g. a social username) into a domain label.

    Applies: lowercase, spaces/underscores to hyphens, strip other
    characters, trim and collapse hyphens, truncate to 63 characters.
    """
    sanitized = name.lower()
    sanitized = re.sub(r"[\s_]", "-", sanitized)
    sanitized = re.sub(r"[^a-z0-9-]", "", sanitized)
    sanitized = sanitized.strip("-")
    sanitized = re.sub(r"-{2,}", "-", sanitized)
    if len(sanitized) > MAX_DOMAIN_LENGTH:
        sanitized = sanitized[:MAX_DOMAIN_LENGTH].rstrip("-")
    return sanitized


def validate_domain_name_format(domain: str) -> str | None:
    """
    Check a domain label against the format rules.

    Returns:
        None if the label is valid, otherwise the first violated rule
    """
    if not domain:
        return "Domain name is required"
    if len(domain) < MIN_DOMAIN_LENGTH:
        return f"Domain must be at least {MIN_DOMAIN_LENGTH} characters"
    if len(domain) > MAX_DOMAIN_LENGTH:
        return f"Domain must be at most {MAX_DOMAIN_LENGTH} characters"
    if not _LABEL_CHARSET.match(domain):
        return "Domain can only contain lowercase letters, numbers, and hyphens"
    if domain.startswith("-") or domain.endswith("-"):
        return "Domain cannot start or end with a hyphen"
    if "--" in domain:
        return "Domain cannot contain consecutive hyphens"
    return None


def generate_domain_from_fid(fid: int) -> str:
    return f"fid{fid}"


def generate_domain_from_username_and_fid(username: str | None, fid: int) -> str:
    """Prefer the sanitized username, fall back to the FID-based label."""
    if username and username.strip():
        sanitized = sanitize_domain_name(username)
        if MIN_DOMAIN_LENGTH <= len(sanitized) <= MAX_DOMAIN_LENGTH:
            return sanitized
    return generate_domain_from_fid(fid)


def generate_domain_suggestions(username: str, fid: int, limit: int = 5) -> list[str]:
    """
    Build candidate domain labels for a user.

    Order: sanitized username, username-fid, fid<N>, shortened username
    variant. Only valid, distinct labels are returned.
    """
    suggestions: list[str] = []
    base = sanitize_domain_name(username)

    def add(candidate: str) -> None:
        if len(suggestions) >= limit or candidate in suggestions:
            return
        if validate_domain_name_format(candidate) is None:
            suggestions.append(candidate)

    add(base)
    add(f"{base}-{fid}")
    add(generate_domain_from_fid(fid))
    if len(base) > 10:
        add(f"{base[:10].rstrip('-')}-{str(fid)[-2:]}")

    return suggestions[:limit]
