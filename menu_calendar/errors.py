"""
Exceptions raised by the meal menu pipeline
"""


class MealMenuError(Exception):
    """Base class for meal menu failures"""


class DateValidationError(MealMenuError):
    """No date selected, or the date could not be read"""


class MealFetchError(MealMenuError):
    """The proxy or upstream API could not be reached, or answered non-2xx"""


class MealResponseError(MealMenuError):
    """The response body is not a usable meal document"""


class MealApiError(MealResponseError):
    """The API reported a result code other than success"""

    def __init__(self, code: str, message: str = ''):
        self.code = code
        self.message = message
        detail = f"{code}: {message}" if message else code
        super().__init__(f"No meal data found ({detail})")
