class SwarmboardError(Exception):
    """Base class for errors the HTTP layer knows how to report."""

    status_code = 500
    error = "server_error"

    def to_dict(self):
        return {"error": self.error, "message": str(self)}


class ValidationError(SwarmboardError):
    status_code = 400
    error = "validation_error"


class StoreError(SwarmboardError):
    status_code = 500
    error = "store_error"


class ApiError(SwarmboardError):
    """Upstream item API answered with a non-2xx status."""

    status_code = 500
    error = "upstream_error"

    def __init__(self, status, text):
        if status is None:
            super().__init__(f"Upstream API request failed: {text}")
        else:
            super().__init__(f"Upstream API returned {status}: {text}")
        self.status = status
        self.text = text

    def to_dict(self):
        data = super().to_dict()
        data["upstream_status"] = self.status
        data["upstream_body"] = self.text
        return data


class NotConfiguredError(SwarmboardError):
    status_code = 503
    error = "not_configured"


class SecretsError(SwarmboardError):
    error = "secrets_error"
