"""Errors raised by room transitions.

Only host-only transitions and request validation raise; the socket layer
turns these into failed acknowledgements.
"""


class RoomError(Exception):
    message = 'Room error'

    def __init__(self, message=None):
        super().__init__(message or self.message)
        if message:
            self.message = message

    def to_ack(self):
        return {'message': self.message}


class RoomNotFound(RoomError):
    message = 'Room not found'


class NotAuthorized(RoomError):
    message = 'Only host can do that'


class InvalidRequest(RoomError):
    message = 'Invalid request'


class ConnectionClosed(RoomError):
    message = 'Connection closed'
