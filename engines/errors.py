"""
Service ROI Calculator — input errors shared by the engines and the API layer.
"""


class InvalidInputError(ValueError):
    """Raised when a calculator input is missing, non-numeric, non-finite or out of range."""

    def __init__(self, field, message):
        super().__init__(message)
        self.field = field

    def to_dict(self):
        return {'status': 'error', 'field': self.field, 'message': str(self)}
