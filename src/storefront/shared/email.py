"""Email address checks shared by the identity model and its commands."""


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def is_valid_email(email: str) -> bool:
    """Structural check: one ``@``, sane local and domain parts, no forbidden characters."""
    if not email or any(ch in email for ch in (" ", "\t", "\n")):
        return False

    if email.count("@") != 1:
        return False

    local_part, domain_part = email.split("@", 1)

    if not local_part or local_part.startswith(".") or local_part.endswith("."):
        return False

    if not domain_part or domain_part.startswith(".") or domain_part.endswith("."):
        return False

    if "." not in domain_part or ".." in local_part or ".." in domain_part:
        return False

    for label in domain_part.split("."):
        if label.startswith("-") or label.endswith("-"):
            return False

    return not any(forbidden in email for forbidden in (";", ",", "(", ")", '"', ":", "<", ">", "[", "]", "\\"))
