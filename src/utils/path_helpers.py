import re


def path_matches(path: str, allowed_paths: set[str]) -> bool:
    """True if ``path`` is in ``allowed_paths``, ignoring one trailing slash."""
    if path in allowed_paths:
        return True
    alternate = path[:-1] if path.endswith("/") else f"{path}/"
    return alternate in allowed_paths


def path_matches_pattern(
    path: str, patterns: list[tuple[str | None, str]], method: str | None = None
) -> bool:
    """Check ``path`` against (method, regex) pairs; a None method matches any."""
    for allowed_method, pattern in patterns:
        if allowed_method and method and allowed_method.upper() != method.upper():
            continue
        if re.match(pattern, path):
            return True
    return False
