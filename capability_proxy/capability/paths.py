from urllib.parse import quote

ORCHESTRATION_RESOURCE = "orchestration"
READ_SCOPE_PREFIX = "/r"


def encode_capability_key(key: str) -> str:
    """Percent-encode a capability key so it always occupies a single path segment."""
    return quote(key, safe="")


def build_capability_path(key: str, resource: str = ORCHESTRATION_RESOURCE) -> str:
    """
    Build the backend-relative path for a capability-scoped resource.

    ``/``, ``?``, ``#``, ``%`` and every other reserved character in the key are
    escaped, so a key can neither add path levels nor start a query or
    fragment. Callers reject empty keys before calling this.
    """
    return f"{READ_SCOPE_PREFIX}/{encode_capability_key(key)}/{resource}"
