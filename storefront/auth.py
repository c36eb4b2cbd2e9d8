from fastapi import Depends, Request
from passlib.context import CryptContext
from sqlalchemy.orm import Session

from . import models
from .db import get_db
from .errors import UnauthorizedError

SESSION_USER_KEY = "user_id"

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, password_hash: str) -> bool:
    return pwd_context.verify(plain_password, password_hash)


def login_session(request: Request, user: models.User):
    request.session.clear()
    request.session[SESSION_USER_KEY] = user.id


def logout_session(request: Request):
    request.session.clear()


def get_current_user(request: Request, db: Session = Depends(get_db)) -> models.User:
    user_id = request.session.get(SESSION_USER_KEY)
    if user_id is None:
        raise UnauthorizedError()
    user = db.get(models.User, user_id)
    if not user:
        # the account was removed after the session was issued
        request.session.clear()
        raise UnauthorizedError()
    return user
