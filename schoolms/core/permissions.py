from fastapi import Depends, HTTPException, status

from schoolms.core.current_user import get_current_user
from schoolms.models.user import User, UserType


def _check_role(user: User, role: UserType) -> User:
    if user.user_type is not role:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"{role.value.capitalize()} role required",
        )
    return user


def require_admin(current_user: User = Depends(get_current_user)) -> User:
    return _check_role(current_user, UserType.ADMIN)


def require_teacher(current_user: User = Depends(get_current_user)) -> User:
    return _check_role(current_user, UserType.TEACHER)


def require_student(current_user: User = Depends(get_current_user)) -> User:
    return _check_role(current_user, UserType.STUDENT)
