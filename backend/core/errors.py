"""Failure kinds raised by the booking and payment workflow.

The workflow never builds HTTP responses itself; the API layer translates these
into status codes through ``core.exceptions.workflow_exception_handler``.
"""


class WorkflowError(Exception):
    code = "error"
    default_message = "Request could not be completed."

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class NotFound(WorkflowError):
    code = "not_found"
    default_message = "Not found."


class ValidationError(WorkflowError):
    code = "invalid"
    default_message = "Invalid request."


class Conflict(WorkflowError):
    code = "conflict"
    default_message = "Request conflicts with existing data."


class Forbidden(WorkflowError):
    code = "forbidden"
    default_message = "Not authorized."
