"""Error types raised by the API client and resource services."""

NETWORK_ERROR = "NETWORK_ERROR"
HTTP_ERROR = "HTTP_ERROR"
NO_AVAILABLE_SEATS = "NO_AVAILABLE_SEATS"


class ApiClientError(Exception):
    """A request to the inventory API failed.

    Attributes:
        message: Human readable description (server supplied when available)
        status: HTTP status code, or 0 when the request never completed
        code: Machine readable error code, defaults to ``HTTP_ERROR``
        details: Optional extra detail string(s) from the error body
    """

    def __init__(
        self,
        message: str,
        status: int,
        code: str = HTTP_ERROR,
        details: str | list[str] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status = status
        self.code = code
        self.details = details

    @property
    def is_client_error(self) -> bool:
        """4xx responses are caller mistakes, not transient conditions."""
        return 400 <= self.status < 500

    @property
    def is_server_error(self) -> bool:
        return self.status >= 500

    @property
    def is_network_error(self) -> bool:
        return self.status == 0

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(status={self.status}, code={self.code!r}, "
            f"message={self.message!r})"
        )


class LicenseSeatsExhaustedError(ApiClientError):
    """A license assignment was requested for a license with no free seats.

    Raised before the request is dispatched.
    """

    def __init__(self, license_id: int) -> None:
        super().__init__(
            f"License {license_id} has no available seats",
            status=409,
            code=NO_AVAILABLE_SEATS,
        )
        self.license_id = license_id
