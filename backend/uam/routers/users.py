from datetime import datetime, timezone
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, status, UploadFile, File
from sqlalchemy.orm import Session

from uam.database import get_db
from uam.models.user import User, Role, UserStatus
from uam.models.section import Section
from uam.schemas.user import UserCreate, UserUpdate, UserResponse, ProfileUpdate, PasswordChange
from uam.schemas.document import ImageUploadResponse
from uam.auth.jwt import get_current_user
from uam.auth.dependencies import check_admin, check_owner_or_admin
from uam.auth.passwords import hash_password, verify_password
from uam.routers.uploads import attach_image
from uam.services.document_storage import DocumentStorage, get_image_storage, AVATAR_SUBDIRECTORY

router = APIRouter()


def get_active_user(db: Session, user_id: int) -> User:
    user = db.query(User).filter(
        User.id == user_id,
        User.deleted_at.is_(None)
    ).first()
    if not user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found"
        )
    return user


def check_user_unique(db: Session, email: Optional[str], national_id: Optional[str], exclude_id: Optional[int] = None):
    """Email and national id are unique among active users."""
    for column, value, label in ((User.email, email, "email"), (User.national_id, national_id, "national ID")):
        if not value:
            continue
        query = db.query(User).filter(column == value, User.deleted_at.is_(None))
        if exclude_id:
            query = query.filter(User.id != exclude_id)
        if query.first():
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=f"A user with this {label} already exists"
            )


def check_user_section(db: Session, section_id: Optional[int]):
    if section_id is None:
        return
    section = db.query(Section).filter(
        Section.id == section_id,
        Section.deleted_at.is_(None)
    ).first()
    if not section:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Section does not exist or is inactive"
        )


def load_roles(db: Session, role_ids: List[int]) -> List[Role]:
    unique_ids = set(role_ids)
    if not unique_ids:
        return []
    roles = db.query(Role).filter(Role.id.in_(unique_ids), Role.deleted_at.is_(None)).all()
    if len(roles) != len(unique_ids):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="One or more roles do not exist"
        )
    return roles


@router.get("", response_model=List[UserResponse])
async def get_users(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Active users with section and roles."""
    return db.query(User).filter(
        User.deleted_at.is_(None)
    ).order_by(User.last_name, User.first_name).all()


# ============== Own account ==============

@router.get("/me", response_model=UserResponse)
async def get_me(current_user: User = Depends(get_current_user)):
    return current_user


@router.put("/me/profile", response_model=UserResponse)
async def update_profile(
    profile_data: ProfileUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    update_data = profile_data.model_dump(exclude_unset=True)
    if not update_data:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No data to update"
        )
    for field, value in update_data.items():
        setattr(current_user, field, value)

    db.commit()
    db.refresh(current_user)
    return current_user


@router.put("/me/password")
async def change_password(
    password_data: PasswordChange,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    if not verify_password(password_data.current_password, current_user.password_hash):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="The current password is incorrect"
        )
    current_user.password_hash = hash_password(password_data.new_password)
    db.commit()
    return {"message": "Password updated"}


@router.post("/me/avatar", response_model=ImageUploadResponse)
async def upload_my_avatar(
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    storage: DocumentStorage = Depends(get_image_storage),
    current_user: User = Depends(get_current_user)
):
    url = await attach_image(db, storage, file, AVATAR_SUBDIRECTORY, current_user, "avatar_url")
    return ImageUploadResponse(message="Avatar updated", image_url=url)


# ============== Administration ==============

@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return get_active_user(db, user_id)


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_user(
    user_data: UserCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Creates a user. Admin only."""
    check_admin(current_user)
    check_user_unique(db, user_data.email, user_data.national_id)
    check_user_section(db, user_data.section_id)
    roles = load_roles(db, user_data.role_ids)

    user = User(
        **user_data.model_dump(exclude={"password", "role_ids"}),
        password_hash=hash_password(user_data.password),
    )
    user.roles = roles
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@router.put("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: int,
    user_data: UserUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Partial update. Admin only. Given role_ids replace the role set."""
    check_admin(current_user)
    user = get_active_user(db, user_id)

    update_data = user_data.model_dump(exclude_unset=True)
    if not update_data:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No data to update"
        )
    check_user_unique(db, update_data.get("email"), update_data.get("national_id"), exclude_id=user_id)
    check_user_section(db, update_data.get("section_id"))

    role_ids = update_data.pop("role_ids", None)
    if role_ids is not None:
        user.roles = load_roles(db, role_ids)

    for field, value in update_data.items():
        setattr(user, field, value)

    db.commit()
    db.refresh(user)
    return user


@router.delete("/{user_id}")
async def delete_user(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Soft delete: the account is disabled and hidden. Admin only."""
    check_admin(current_user)
    if user_id == current_user.id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You cannot delete your own account"
        )
    user = get_active_user(db, user_id)

    user.deleted_at = datetime.now(timezone.utc)
    user.status = UserStatus.DISABLED
    db.commit()
    return {"message": "User deleted"}


@router.post("/{user_id}/avatar", response_model=ImageUploadResponse)
async def upload_user_avatar(
    user_id: int,
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    storage: DocumentStorage = Depends(get_image_storage),
    current_user: User = Depends(get_current_user)
):
    """The user themself or an Admin."""
    check_owner_or_admin(current_user, user_id)
    user = get_active_user(db, user_id)
    url = await attach_image(db, storage, file, AVATAR_SUBDIRECTORY, user, "avatar_url")
    return ImageUploadResponse(message="Avatar updated", image_url=url)
