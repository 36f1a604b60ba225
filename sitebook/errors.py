class ReservationError(Exception):
    """Base class for rejections the API reports back to the caller.

    Every subclass names the invariant it guards through ``code`` and the
    HTTP status it maps to through ``status_code``.
    """

    status_code = 400
    code = "reservation_error"
    default_message = "The request could not be completed."

    def __init__(self, msg: str | None = None):
        self.msg = msg or self.default_message
        super().__init__(self.msg)


class InvalidParameterError(ReservationError):
    status_code = 422
    code = "invalid_parameter"
    default_message = "Invalid scheduling parameters."


class OutOfHoursError(ReservationError):
    status_code = 422
    code = "out_of_hours"
    default_message = "The requested time lies outside of the operating hours."


class OverlapError(ReservationError):
    status_code = 409
    code = "overlap"
    default_message = "A conflicting reservation exists for the requested time."


class NotOwnerError(ReservationError):
    status_code = 403
    code = "not_owner"
    default_message = "Only the user who made the reservation may delete it."


class NotFoundError(ReservationError):
    status_code = 404
    code = "not_found"
    default_message = "Not found."


class PermissionDeniedError(ReservationError):
    status_code = 403
    code = "forbidden"
    default_message = "Admin access required."


class CourseFullError(ReservationError):
    status_code = 409
    code = "course_full"
    default_message = "Course is full."


class AlreadyRegisteredError(ReservationError):
    status_code = 409
    code = "already_registered"
    default_message = "You are already registered for this course."
