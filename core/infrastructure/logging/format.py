from typing import Any, Dict

LEVEL_COLORS = {
    "CRITICAL": "<red>",
    "DEBUG": "<white>",
    "ERROR": "<magenta>",
    "INFO": "<blue>",
    "SUCCESS": "<green>",
    "TRACE": "<dim>",
    "WARNING": "<yellow>",
}


def _escape(text: str) -> str:
    return str(text).replace("{", "{{").replace("}", "}}").replace("<", "\\<")


class CustomLogFormat:
    """Manage custom log formatting for console and file outputs.

    Takes a Loguru record dictionary and formats it into format strings
    for the different sinks. Console lines carry the request id; file lines
    also carry the rest of the request context.
    """

    def __init__(self, record: Dict[str, Any]) -> None:
        self.record = record
        self.time_str = self.record["time"].strftime("%Y-%m-%d %H:%M:%S.%f")[:-4]
        self.level = self.record["level"].name
        self.level_color = LEVEL_COLORS.get(self.level, "<white>")
        self.level_close = f"</{self.level_color.strip('<>')}>"
        self.location = _escape(
            f"{self.record['name']}:{self.record['function']}:{self.record['line']}"
        )
        self.request_id = self.record["extra"].get("request_id")

    def _prefix(self) -> str:
        request_tag = f"[{self.request_id}] " if self.request_id else ""
        return (
            f"<dim><bold>{self.time_str}</bold></dim> | "
            f"<level>{self.level_color}{self.level:8}{self.level_close}</level> | "
            f"<cyan>{self.location}</cyan> - {request_tag}"
        )

    def log_console_format(self) -> str:
        """Format the log record for console output.

        Includes timestamp, colored level, module location, request id, and message.

        Returns
        -------
        str
            Format string suitable for console logging.
        """
        return (
            self._prefix()
            + f"<level>{self.level_color}{{message}}{self.level_close}</level>"
            "\n{exception}"
        )

    def log_file_format(self) -> str:
        """Format the log record for file output.

        Includes everything the console line has plus extra context data
        (client ip, method, path, ...).

        Returns
        -------
        str
            Format string suitable for file logging.
        """
        context_parts = [
            f"{key}={value}"
            for key, value in self.record["extra"].items()
            if key != "request_id"
        ]
        context_string = (
            f" | {_escape(', '.join(context_parts))}" if context_parts else ""
        )

        return (
            self._prefix()
            + f"<level>{self.level_color}{{message}}{self.level_close}</level>"
            f"<bold><dim>{context_string}</dim></bold>"
            "\n{exception}"
        )
