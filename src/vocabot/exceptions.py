"""Exceptions raised by the learning engine."""


class NotRegisteredError(ValueError):
    """Raised when a chat has no active registration."""

    def __init__(self, chat_id: int):
        super().__init__(f"Chat {chat_id} is not registered or not active")
        self.chat_id = chat_id


class InvalidTimeFormatError(ValueError):
    """Raised when a time of day is not in HH:MM format."""

    def __init__(self, value: str):
        super().__init__(f"Invalid time format. Expected HH:MM, got {value!r}")
        self.value = value


class MalformedScheduleError(InvalidTimeFormatError):
    """Raised when a stored schedule time cannot be parsed."""
