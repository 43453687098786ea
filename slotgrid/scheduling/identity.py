def normalize_email(email: str) -> str:
    """Canonical participant identity: trimmed and lowercased.

    Raises:
        ValueError: if the value is not shaped like ``local@domain``.
    """
    normalized = email.strip().lower()
    local, sep, domain = normalized.partition("@")
    if not sep or not local or not domain or "@" in domain or len(normalized) > 254:
        raise ValueError(f"invalid email address: {email!r}")
    return normalized
