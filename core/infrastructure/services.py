import re
from typing import Any, Dict, List, Pattern


class DataSanitizer:
    """Data sanitizer for removing/masking sensitive information
    from logs, exceptions, and other outputs.

    Defines a set of patterns and methods to identify and mask device
    registration tokens, service account material, and API keys
    before they are logged or exposed.
    """

    MASK = "***MASKED***"

    def __init__(self):
        self.sensitive_patterns: List[Pattern[str]] = [
            re.compile(r"token", re.IGNORECASE),
            re.compile(r"secret", re.IGNORECASE),
            re.compile(r"password", re.IGNORECASE),
            re.compile(r"private_key", re.IGNORECASE),
            re.compile(r"credential", re.IGNORECASE),
            re.compile(r"api[_-]?key", re.IGNORECASE),
            re.compile(r"authorization", re.IGNORECASE),
            re.compile(r"b64", re.IGNORECASE),
        ]

        self.registration_token_pattern = re.compile(
            r"[A-Za-z0-9_-]{8,}:APA91[A-Za-z0-9_-]{20,}"
        )
        self.opaque_blob_pattern = re.compile(r"[A-Za-z0-9+/=_-]{64,}")
        self.query_params_pattern = re.compile(
            r"([a-zA-Z_][a-zA-Z0-9_-]*)=([^&\s]+)"
        )

    def sanitize_for_logging(self, data: Any) -> Any:
        """Sanitize data for logging purposes.

        Recursively processes input data (strings, dicts, lists) to mask
        sensitive information based on predefined patterns.

        Parameters
        ----------
        data: Any
            Data to be sanitized (can be string, dict, list, etc.).

        Returns
        -------
        Any
            Sanitized data with sensitive information masked.
        """
        return self._sanitize_value(data)

    def sanitize_exception_for_logging(self, exception: Exception | str) -> str:
        """Sanitize an exception message for logging.

        Parameters
        ----------
        exception: Exception | str
            Exception object (or its message) to sanitize.

        Returns
        -------
        str
            Sanitized exception text, or a generic placeholder if sanitization fails.
        """
        try:
            if isinstance(exception, Exception) and exception.args:
                return "; ".join(
                    str(self._sanitize_value(arg)) for arg in exception.args
                )
            return self._sanitize_string(str(exception))
        except Exception:
            return f"***SANITIZED*** {type(exception).__name__}"

    def mask_token(self, token: str | None) -> str:
        """Shorten a device registration token to a prefix operators can correlate.

        Parameters
        ----------
        token: str | None
            Registration token to mask.

        Returns
        -------
        str
            First six characters followed by a mask, or the mask alone for short tokens.
        """
        if not token:
            return "<none>"
        if len(token) <= 12:
            return self.MASK
        return f"{token[:6]}...{self.MASK}"

    def _is_sensitive_field(self, field_name: str) -> bool:
        return any(pattern.search(field_name) for pattern in self.sensitive_patterns)

    def _sanitize_string(self, text: str, max_length: int = 1000) -> str:
        """Sanitize a string by masking tokens, opaque blobs, and sensitive query params.

        Also truncates the string if it exceeds `max_length`.

        Parameters
        ----------
        text: str
            String to sanitize.
        max_length: int, default=1000
            Maximum length of the sanitized string.

        Returns
        -------
        str
            Sanitized and potentially truncated string.
        """
        if not isinstance(text, str):
            text = str(text)

        if len(text) > max_length:
            text = text[:max_length] + "..."

        text = self.registration_token_pattern.sub(
            lambda m: self.mask_token(m.group()), text
        )
        text = self.opaque_blob_pattern.sub(self.MASK, text)

        def mask_query_match(match):
            key = match.group(1)
            if self._is_sensitive_field(key):
                return f"{key}={self.MASK}"
            return match.group(0)

        return self.query_params_pattern.sub(mask_query_match, text)

    def _sanitize_dict(
        self, data: Dict[str, Any], max_depth: int = 5
    ) -> Dict[str, Any]:
        if max_depth <= 0:
            return {"<max_depth_reached>": "..."}

        sanitized = {}
        for key, value in data.items():
            if self._is_sensitive_field(str(key)):
                sanitized[key] = self.MASK
            else:
                sanitized[key] = self._sanitize_value(value, max_depth - 1)

        return sanitized

    def _sanitize_value(self, value: Any, max_depth: int = 5) -> Any:
        """Determine the appropriate sanitization method based on the value type.

        Parameters
        ----------
        value: Any
            Value to sanitize.
        max_depth: int, default=5
            Current recursion depth limit.

        Returns
        -------
        Any
            Sanitized value.
        """
        if value is None:
            return None

        if isinstance(value, dict):
            return self._sanitize_dict(value, max_depth)
        elif isinstance(value, (list, tuple)):
            if max_depth <= 0:
                return ["<max_depth_reached>"]
            return [self._sanitize_value(item, max_depth - 1) for item in value[:10]]
        elif isinstance(value, (int, float, bool)):
            return value
        else:
            return self._sanitize_string(str(value))
