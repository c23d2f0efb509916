"""Helpers for classifying PostgREST failures."""

PERMISSION_ERROR_CODES = {"PGRST301", "42501"}
NOT_FOUND_ERROR_CODES = {"PGRST116"}


def _error_code(exc: Exception):
    code = getattr(exc, "code", None)
    if code is None and exc.args and isinstance(exc.args[0], dict):
        code = exc.args[0].get("code")
    return code


def is_permission_error(exc: Exception) -> bool:
    """True when RLS rejected the read (the caller simply cannot see the rows)."""
    if _error_code(exc) in PERMISSION_ERROR_CODES:
        return True
    return "permission" in str(getattr(exc, "message", None) or exc).lower()


def is_not_found_error(exc: Exception) -> bool:
    """True for `.single()` queries that matched zero rows."""
    return _error_code(exc) in NOT_FOUND_ERROR_CODES
