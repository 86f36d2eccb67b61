class TaskError(Exception):
    status_code = 500

    def __init__(self, message, field=None):
        super().__init__(message)
        self.message = message
        self.field = field

    def to_dict(self):
        body = {"error": self.message}
        if self.field:
            body["field"] = self.field
        return body


class ValidationError(TaskError):
    status_code = 400


class NotFoundError(TaskError):
    status_code = 404

    def __init__(self, message="Task not found", field=None):
        super().__init__(message, field)


class StoreError(TaskError):
    status_code = 500
