class LoginTokenError(Exception):
    """Base class for login token errors."""


class LoginTokenMismatch(LoginTokenError):
    """Raised when a known series is presented with a token that matches none of its rows.

    This is the signature of a replayed (probably stolen) token: the legitimate
    token of the series was rotated and an old copy came back. Callers should
    log the user out everywhere using `user_id`.
    """

    def __init__(self, user_id: str, message: str = "Tokens do not match") -> None:
        super().__init__(message)
        self.user_id = user_id
