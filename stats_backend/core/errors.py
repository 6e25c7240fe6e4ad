"""
Error types raised while normalizing stats query parameters.

Every failure to turn request parameters into a Query is reported as a single
exception kind, InvalidQueryParameter, naming the offending parameter and a
human readable reason. The API layer maps it to an HTTP 400 response.
"""


class InvalidQueryParameter(ValueError):
    """
    A request parameter could not be parsed into a valid query.

    Attributes:
        parameter: Name of the offending request parameter (e.g. "date", "filters").
        reason: Human readable description of what was wrong with it.
    """

    def __init__(self, parameter: str, reason: str):
        self.parameter = parameter
        self.reason = reason
        super().__init__(f"Invalid value for parameter '{parameter}': {reason}")

    def to_dict(self) -> dict:
        """Serialize for an API error body."""
        return {"error": str(self), "parameter": self.parameter}
