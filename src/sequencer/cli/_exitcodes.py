"""Exit codes for the seq CLI."""

SUCCESS = 0
NOT_FOUND = 1
USAGE_ERROR = 2
BACKEND_ERROR = 3
TIMEOUT = 4
