def normalize_version(version: str) -> str:
    """
    Strips surrounding whitespace and a leading 'v' from a version string.

    Cluster templates write 'v1.9.0' while image markers and the plan use
    '1.9.0'; both spellings must resolve to the same key.
    """
    version = str(version).strip()
    if version[:1] in ("v", "V"):
        version = version[1:]
    return version
