"""Structural email validation used before login and signup requests."""

from shared.exceptions import ValidationError

_FORBIDDEN = (";", ",", "(", ")", '"', ":", "<", ">", "\\")


def is_valid_email(email: str) -> bool:
    """Check that an email address follows a basic valid structure."""
    if not email or any(ch in email for ch in (" ", "\t", "\n")):
        return False

    if email.count("@") != 1:
        return False

    local_part, domain_part = email.split("@", 1)

    if not local_part or local_part.startswith(".") or local_part.endswith("."):
        return False

    if not domain_part or domain_part.startswith(".") or domain_part.endswith("."):
        return False

    for label in domain_part.split("."):
        if label.startswith("-") or label.endswith("-"):
            return False

    if "." not in domain_part:
        return False

    if ".." in local_part or ".." in domain_part:
        return False

    return not any(ch in email for ch in _FORBIDDEN)


def ensure_valid_email(email: str) -> str:
    normalized = email.strip()
    if not is_valid_email(normalized):
        raise ValidationError({"email": [f"Invalid email address: {email!r}"]})
    return normalized
