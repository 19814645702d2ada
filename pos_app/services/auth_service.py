"""
Authentication service for the shop's admin accounts.

Handles login, registration and credential changes. There are no tokens:
a successful login only tells the till that the credentials are valid.
"""
import logging

from sqlalchemy.exc import IntegrityError

from pos_app.models import AdminUser
from pos_app.exceptions import BusinessLogicError, ConstraintViolation, NotFoundError, UnauthorizedError

logger = logging.getLogger(__name__)


def authenticate(session, email, password):
    """
    Check an email/password pair.

    Returns:
        AdminUser: the matching account

    Raises:
        UnauthorizedError: unknown email or wrong password
    """
    email = (email or '').strip()
    user = session.query(AdminUser).filter_by(email=email).first()
    if not user or not user.check_password(password or ''):
        logger.warning(f"Failed login attempt for: {email}")
        raise UnauthorizedError('Invalid credentials')

    logger.info(f"Admin login: {email}")
    return user


def register_admin(session, email, password):
    """
    Create a new admin account.

    Raises:
        BusinessLogicError: blank email or password
        ConstraintViolation: email already registered
    """
    email = (email or '').strip()
    if not email or not password:
        raise BusinessLogicError('Email and password are required')

    if session.query(AdminUser).filter_by(email=email).first():
        raise ConstraintViolation('Email already registered')

    user = AdminUser(email=email)
    user.set_password(password)
    session.add(user)
    try:
        session.commit()
    except IntegrityError as e:
        # Race with a concurrent registration of the same email
        session.rollback()
        logger.error(f"Error registering admin (IntegrityError): {e.orig}")
        raise ConstraintViolation('Email already registered', cause=e.orig)

    logger.info(f"Registered admin: {email}")
    return user


def update_credentials(session, email, password):
    """Replace the primary (first) admin account's email and password."""
    email = (email or '').strip()
    if not email or not password:
        raise BusinessLogicError('Email and password are required')

    user = session.query(AdminUser).order_by(AdminUser.id).first()
    if not user:
        raise NotFoundError('Admin account not found')

    user.email = email
    user.set_password(password)
    try:
        session.commit()
    except IntegrityError as e:
        session.rollback()
        raise ConstraintViolation('Email already registered', cause=e.orig)

    logger.info(f"Admin credentials updated for: {email}")
    return user
