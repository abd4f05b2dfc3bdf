"""User and terminal SQLModels."""

from sqlmodel import Field, SQLModel


class User(SQLModel, table=True):
    """Shop-floor user identified by employee id, with role flags."""

    __tablename__ = "users"

    id: int | None = Field(default=None, primary_key=True)
    employee_id: str = Field(max_length=50, unique=True, index=True)
    name: str = Field(max_length=100)
    is_active: bool = Field(default=True)
    can_operate: bool = Field(default=False)
    can_setup: bool = Field(default=False)
    can_inspect: bool = Field(default=False)
    can_remanufacture: bool = Field(default=False)


class Terminal(SQLModel, table=True):
    """Physical terminal bound to one operation code."""

    __tablename__ = "terminals"

    id: int | None = Field(default=None, primary_key=True)
    terminal_id: str = Field(max_length=50, unique=True, index=True)
    terminal_name: str = Field(max_length=100)
    operation_code: str = Field(max_length=20)
    operation_id: int | None = Field(default=None, foreign_key="operations.id")
    hashed_password: str
    is_active: bool = Field(default=True)
