# src/shared/error_codes.py
# Central mapping that aligns with the Error Contract.
# Keep keys stable: hosts and the chat assistant rely on these.
ERROR_CODES = {
    # ─── Validation & Requests ──────────────────────────────────────────────
    "validation_error": {
        "http": 422,
        "message": "Validation failed for one or more fields."
    },
    "invalid_json": {
        "http": 400,
        "message": "Request body is not valid JSON."
    },

    # ─── Authentication ────────────────────────────────────────────────────
    "invalid_signature": {
        "http": 401,
        "message": "Callback signature is missing or invalid."
    },

    # ─── Configuration ─────────────────────────────────────────────────────
    "not_configured": {
        "http": 503,
        "message": "A required integration is not configured."
    },

    # ─── Correlation ───────────────────────────────────────────────────────
    "duplicate_key": {
        "http": 409,
        "message": "A resolution is already in flight for this correlation key."
    },
    "resolution_failed": {
        "http": 502,
        "message": "Unable to locate the help-desk thread for this request."
    },
    "trigger_failed": {
        "http": 502,
        "message": "The outbound email could not be sent."
    },
    "annotation_failed": {
        "http": 502,
        "message": "The internal comment could not be posted."
    },
    "upstream_error": {
        "http": 502,
        "message": "The help-desk API returned an error."
    },

    # ─── Generic ───────────────────────────────────────────────────────────
    "not_found": {
        "http": 404,
        "message": "Resource not found."
    },
    "internal_error": {
        "http": 500,
        "message": "An unexpected error occurred. Please try again later."
    },
}
