"""
Planning error taxonomy.

Every error carries one short human message and the HTTP status the API
answers with. main.py maps any PlanningError to `{"detail": message}`.
"""


class PlanningError(Exception):
    status_code = 500
    message = "unexpected error"

    def __init__(self, message=None):
        if message:
            self.message = message
        super().__init__(self.message)


class InvalidInputError(PlanningError):
    status_code = 400
    message = "invalid input"


class NotFoundError(PlanningError):
    status_code = 404
    message = "not found"


class ConflictError(PlanningError):
    status_code = 409
    message = "conflict"


class ProjectNotFoundError(NotFoundError):
    message = "project not found"


class PhaseNotFoundError(NotFoundError):
    message = "project phase not found"


class TaskNotFoundError(NotFoundError):
    message = "project task not found"


class TaskCommentNotFoundError(NotFoundError):
    message = "project task comment not found"


class RevenueNotFoundError(NotFoundError):
    message = "project revenue not found"


class MonthlyChargeNotFoundError(NotFoundError):
    message = "project monthly charge not found"


class ProjectTypeNotFoundError(NotFoundError):
    message = "project type not found"


# Referenced rows that are missing from a payload answer 400, not 404.
class MissingReferenceError(InvalidInputError):
    message = "referenced record not found"


class MissingProjectTypeError(MissingReferenceError):
    message = "project type not found"


class MissingProjectCategoryError(MissingReferenceError):
    message = "project category not found"


class MissingProjectClientsError(MissingReferenceError):
    message = "one or more clients not found"


class MissingProjectManagersError(MissingReferenceError):
    message = "one or more managers not found"


class MissingResponsibleUserError(MissingReferenceError):
    message = "responsible user not found"


class ProjectNameInUseError(ConflictError):
    message = "project name already in use"


class ProjectTypeCodeInUseError(ConflictError):
    message = "project type code already in use"


class ProjectTypeNameInUseError(ConflictError):
    message = "project type name already in use"


class MonthlyChargeLockedError(ConflictError):
    message = "paid or cancelled monthly charges cannot be edited"
