"""UserProfile model: application user with role-based access control."""

from sqlalchemy import Boolean, Column, DateTime, Integer, String
from sqlalchemy.sql import func

from budgetflow.database import Base


class UserProfile(Base):
    """System user whose role controls what they may do with budgets.

    Roles:
        - admin: Full access including departments, users and settings.
        - finance_manager / finance_team: Review budgets of every department.
        - department_manager / department_user: Author budgets; see only
          their own department.
        - view_only: Read-only access.

    Attributes:
        id: Primary key.
        username: Unique login username.
        email: Unique email address.
        password_hash: Bcrypt-hashed password (never store plain text).
        full_name: Display name.
        role: Role identifier (see ``Role``).
        department: Department name; scopes visibility for department roles.
        cost_center: Default cost center code for new budgets.
        is_active: Whether the account may log in.
        last_login_at: Timestamp of the last successful login.
        created_at: Record creation timestamp.
        updated_at: Last modification timestamp.
    """

    __tablename__ = "user_profile"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(100), unique=True, nullable=False)
    email = Column(String(200), unique=True, nullable=False)
    password_hash = Column(String(200), nullable=False)
    full_name = Column(String(300), nullable=True)
    role = Column(String(50), default="view_only", nullable=False)
    department = Column(String(200), nullable=True)
    cost_center = Column(String(50), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    last_login_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=func.now(), nullable=False)
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now(), nullable=False)
