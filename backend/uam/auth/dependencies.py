from fastapi import HTTPException, status

from uam.models.user import User, ADMIN_ROLE


def check_role(user: User, required_role: str) -> bool:
    """Raises 403 unless the user holds the given role."""
    if not user.has_role(required_role):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"This action requires the role: {required_role}"
        )
    return True


def check_admin(user: User) -> bool:
    return check_role(user, ADMIN_ROLE)


def check_owner_or_admin(user: User, owner_id: int) -> bool:
    """The owner of a record (e.g. the uploader of a document) or an Admin."""
    if user.id == owner_id or user.is_admin:
        return True
    raise HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail="You do not have permission to access this resource"
    )
