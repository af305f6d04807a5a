"""Field constraints shared by the services."""

from greenpoll.errors import ValidationError

USERNAME_LENGTH = (3, 63)
EMAIL_LENGTH = (5, 63)
PASSWORD_LENGTH = (8, 255)
POLL_TITLE_LENGTH = (1, 255)
POLL_DESCRIPTION_LENGTH = (0, 1023)
POLL_OPTION_VALUE_LENGTH = (1, 255)


def check_length(label: str, value: str, bounds: tuple[int, int]) -> str:
    """Return ``value`` unchanged, or raise ValidationError if its length is out of bounds."""
    min_len, max_len = bounds
    if len(value) < min_len or len(value) > max_len:
        if min_len == 0:
            raise ValidationError(f"{label} must be at most {max_len} characters")
        raise ValidationError(f"{label} must be between {min_len} and {max_len} characters")
    return value


def normalize_email(email: str) -> str:
    return email.strip().lower()


def validate_username(username: str) -> str:
    return check_length("Username", username.strip(), USERNAME_LENGTH)


def validate_email(email: str) -> str:
    email = check_length("Email", normalize_email(email), EMAIL_LENGTH)
    local, _, domain = email.partition("@")
    if not local or not domain:
        raise ValidationError("Email address is invalid")
    return email


def validate_password(password: str) -> str:
    return check_length("Password", password, PASSWORD_LENGTH)
