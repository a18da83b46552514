"""
Database models for Campus (authoritative ORM definitions).

This module defines the SQLAlchemy Base with a naming convention for stable
Alembic autogenerate diffs, and exposes `target_metadata` for Alembic.
"""

from datetime import datetime

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKeyConstraint,
    Integer,
    MetaData,
    PrimaryKeyConstraint,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

# Naming convention for deterministic constraint/index names in Alembic diffs
naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


class Base(DeclarativeBase):
    """Base class for all database models with type checking support."""

    metadata = MetaData(naming_convention=naming_convention)


class Departments(Base):
    __tablename__ = "departments"
    __table_args__ = (PrimaryKeyConstraint("id", name="departments_pkey"),)

    id: Mapped[int] = mapped_column(Integer, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime(True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(True), server_default=func.now(), onupdate=func.now()
    )

    students: Mapped[list["Students"]] = relationship(
        "Students", uselist=True, back_populates="dept"
    )
    courses: Mapped[list["Courses"]] = relationship("Courses", uselist=True, back_populates="dept")


class Students(Base):
    __tablename__ = "students"
    __table_args__ = (
        ForeignKeyConstraint(
            ["dept_id"],
            ["departments.id"],
            name="students_dept_id_fkey",
        ),
        PrimaryKeyConstraint("id", name="students_pkey"),
        UniqueConstraint("email", name="students_email_key"),
    )

    id: Mapped[int] = mapped_column(Integer, autoincrement=True)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    full_name: Mapped[str] = mapped_column(String(255), nullable=False)
    enrolled: Mapped[bool | None] = mapped_column(Boolean)
    dept_id: Mapped[int | None] = mapped_column(Integer)
    created_at: Mapped[datetime] = mapped_column(DateTime(True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(True), server_default=func.now(), onupdate=func.now()
    )

    dept: Mapped["Departments"] = relationship("Departments", back_populates="students")


class Teachers(Base):
    __tablename__ = "teachers"
    __table_args__ = (
        PrimaryKeyConstraint("id", name="teachers_pkey"),
        UniqueConstraint("email", name="teachers_email_key"),
    )

    id: Mapped[int] = mapped_column(Integer, autoincrement=True)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    full_name: Mapped[str] = mapped_column(String(255), nullable=False)
    # FULLTIME | PARTTIME
    type: Mapped[str | None] = mapped_column(String(20))
    created_at: Mapped[datetime] = mapped_column(DateTime(True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(True), server_default=func.now(), onupdate=func.now()
    )

    courses: Mapped[list["Courses"]] = relationship(
        "Courses", uselist=True, back_populates="teacher"
    )


class Courses(Base):
    __tablename__ = "courses"
    __table_args__ = (
        ForeignKeyConstraint(
            ["teacher_id"],
            ["teachers.id"],
            ondelete="SET NULL",
            name="courses_teacher_id_fkey",
        ),
        ForeignKeyConstraint(
            ["dept_id"],
            ["departments.id"],
            ondelete="SET NULL",
            name="courses_dept_id_fkey",
        ),
        PrimaryKeyConstraint("id", name="courses_pkey"),
    )

    id: Mapped[int] = mapped_column(Integer, autoincrement=True)
    code: Mapped[str] = mapped_column(String(50), nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    teacher_id: Mapped[int | None] = mapped_column(Integer)
    dept_id: Mapped[int | None] = mapped_column(Integer)
    created_at: Mapped[datetime] = mapped_column(DateTime(True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(True), server_default=func.now(), onupdate=func.now()
    )

    teacher: Mapped["Teachers"] = relationship("Teachers", back_populates="courses")
    dept: Mapped["Departments"] = relationship("Departments", back_populates="courses")


# Expose metadata for Alembic
target_metadata = Base.metadata

__all__ = [
    "Base",
    "Courses",
    "Departments",
    "Students",
    "Teachers",
    "target_metadata",
]
