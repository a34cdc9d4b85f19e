import logging
from sqlalchemy.exc import IntegrityError
from supportdesk.extensions import db
from supportdesk.errors import EmailAlreadyRegistered, InvalidCredentials, ValidationError
from supportdesk.models.user import User

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6


def register_user(name, email, password):
    """Create a user account."""
    name = (name or "").strip()
    email = (email or "").strip().lower()
    password = password or ""

    if not name or not email or not password:
        raise ValidationError("All fields are required")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters long"
        )
    if User.query.filter_by(email=email).first():
        raise EmailAlreadyRegistered()

    user = User(name=name, email=email)
    user.set_password(password)
    db.session.add(user)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise EmailAlreadyRegistered()

    logger.info("Registered user %d", user.id)
    return user


def authenticate(email, password):
    """Return the user for valid credentials, else raise InvalidCredentials."""
    email = (email or "").strip().lower()
    if not email or not password:
        raise ValidationError("Please enter email and password")

    user = User.query.filter_by(email=email).first()
    if not user or not user.check_password(password):
        raise InvalidCredentials()
    return user
