from .user import (
    UserBase,
    UserCreate,
    UserLite,
    UserLogin,
    UserOut,
    UserPublic,
    UserUpdate,
    create_user_model,
    user_to_schema,
)

__all__ = [
    "UserBase",
    "UserCreate",
    "UserLite",
    "UserLogin",
    "UserOut",
    "UserPublic",
    "UserUpdate",
    "create_user_model",
    "user_to_schema",
]
