"""Domain errors raised by the service layer.

Each error carries the HTTP status code it is rendered with; the mapping is
registered on the application in ``backend.main``.
"""

from fastapi import status


class AppointmentError(Exception):
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(AppointmentError):
    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(AppointmentError):
    status_code = status.HTTP_409_CONFLICT


class InvalidInputError(AppointmentError):
    status_code = status.HTTP_400_BAD_REQUEST


class AuthenticationError(AppointmentError):
    status_code = status.HTTP_401_UNAUTHORIZED


class PaymentError(AppointmentError):
    status_code = status.HTTP_400_BAD_REQUEST
