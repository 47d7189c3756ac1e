"""
Caller identity resolution.

Routes call ``resolve_user_id()`` once and hand the id to the service layer,
so nothing below the route reaches for request or global state.
"""
from flask import current_app, request
from flask_login import current_user
from sqlalchemy.exc import SQLAlchemyError

from quizhub import db
from quizhub.auth.models import User
from quizhub.errors import NotFoundError, PersistenceError


def ensure_default_user() -> User:
    """
    Return the configured default user, creating it on first use.

    Returns:
        The default User row
    """
    email = current_app.config["DEFAULT_USER_EMAIL"]
    user = User.query.filter_by(email=email).first()
    if user:
        return user

    try:
        user = User(
            email=email,
            name=current_app.config["DEFAULT_USER_NAME"],
            role="ADMIN",
        )
        db.session.add(user)
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        raise PersistenceError(f"Could not create default user: {e}") from e

    current_app.logger.info(f"Created default user {email} (id={user.id})")
    return user


def resolve_user_id() -> int:
    """
    Work out which user a request acts as.

    Returns:
        The id of the user named by ``X-User-Id``, or of the default user
        when the header is absent

    Raises:
        NotFoundError: if ``X-User-Id`` is present but names no user
    """
    if current_user.is_authenticated:
        return current_user.id

    header = request.headers.get("X-User-Id")
    if header:
        raise NotFoundError(f"User {header} not found")

    return ensure_default_user().id
