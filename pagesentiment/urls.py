from urllib.parse import urlsplit

ALLOWED_PROTOCOLS = ('http', 'https')

def is_valid_url(text, protocols=ALLOWED_PROTOCOLS) -> bool:
    """True if `text` is an absolute URL with a host and an allowed scheme.

    Never raises: anything that fails to parse is simply not a valid URL.
    """
    try:
        if not isinstance(text, str) or not text.strip():
            return False
        parts = urlsplit(text.strip())
        # Accessing .port validates it (raises ValueError when out of range).
        parts.port
        if not parts.hostname or any(c.isspace() for c in parts.netloc):
            return False
        return parts.scheme.lower() in protocols
    except Exception:
        return False
