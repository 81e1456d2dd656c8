"""Process-wide protocol constants."""

# Version of HTTP this server speaks (without the "HTTP/" prefix).
HTTP_VERSION = "1.1"

# Methods the static file handler accepts.
ALLOWED_METHODS = ("GET", "POST", "HEAD")

# Pre-joined value for the Allow header of 405 responses.
ALLOWED_METHODS_HEADER = ", ".join(ALLOWED_METHODS)
