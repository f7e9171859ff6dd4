"""
Custom exceptions for the garden tracker application.
Business-rule rejections carry a human-readable reason; none are retried.
"""


class GardenTrackerException(Exception):
    """Base exception for garden tracker application"""
    pass


class UnknownActivityException(GardenTrackerException):
    """Raised when a catalog activity id does not exist"""
    def __init__(self, activity_id: str):
        self.activity_id = activity_id
        super().__init__(f"Activity '{activity_id}' not found")


class CapReachedException(GardenTrackerException):
    """Base for daily/weekly cap rejections"""
    def __init__(self, activity_id: str, cap: int, reason: str):
        self.activity_id = activity_id
        self.cap = cap
        self.reason = reason
        super().__init__(reason)


class DailyCapReachedException(CapReachedException):
    """Raised when an activity was already logged dailyCap times today"""
    def __init__(self, activity_id: str, cap: int):
        super().__init__(
            activity_id,
            cap,
            f"You've reached the daily limit of {cap}× for this activity."
        )


class WeeklyCapReachedException(CapReachedException):
    """Raised when an activity was already logged weeklyCap times this week"""
    def __init__(self, activity_id: str, cap: int):
        super().__init__(
            activity_id,
            cap,
            f"You've reached the weekly limit of {cap}× for this activity."
        )


class NotFoundException(GardenTrackerException):
    """Raised when an entity does not exist"""
    pass


class ActivityNotFoundException(NotFoundException):
    """Raised when a logged activity is not found on the given day"""
    def __init__(self, logged_id: int):
        self.logged_id = logged_id
        super().__init__(f"Logged activity with ID {logged_id} not found")


class TodoNotFoundException(NotFoundException):
    """Raised when a to-do is not found"""
    def __init__(self, todo_id: int):
        self.todo_id = todo_id
        super().__init__(f"To-do with ID {todo_id} not found")


class DailyRecordNotFoundException(NotFoundException):
    """Raised when no daily record exists for a date"""
    def __init__(self, day):
        self.day = day
        super().__init__(f"No daily record for {day}")


class TodoLimitReachedException(GardenTrackerException):
    """Raised when a date already holds the maximum number of to-dos"""
    def __init__(self, limit: int):
        self.limit = limit
        super().__init__(f"Maximum {limit} todos per day")


class InvalidTodoStateException(GardenTrackerException):
    """Raised when a to-do transition is not allowed from its current status"""
    def __init__(self, todo_id: int, status: str):
        self.todo_id = todo_id
        self.status = status
        super().__init__(f"To-do {todo_id} is '{status}', expected 'open'")


class BackupException(GardenTrackerException):
    """Raised when backup operations fail"""
    def __init__(self, message: str):
        super().__init__(f"Backup operation failed: {message}")


class ValidationException(GardenTrackerException):
    """Raised when data validation fails"""
    def __init__(self, field: str, message: str):
        self.field = field
        super().__init__(f"Validation error for {field}: {message}")
