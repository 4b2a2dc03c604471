import os
from datetime import datetime, timedelta

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault('DATABASE_URL', 'sqlite:///./test.db')

from backend.auth.dependencies import Identity  # noqa: E402
from backend.core.timeutils import utcnow  # noqa: E402
from backend.database import Base  # noqa: E402
from backend.models import audit_log, availability, booking  # noqa: E402,F401
from backend.models.tenant import Tenant  # noqa: E402
from backend.models.user import Role, User  # noqa: E402
from backend.services.handles import build_handles  # noqa: E402


@pytest.fixture
def session_factory():
    engine = create_engine(
        'sqlite://',
        connect_args={'check_same_thread': False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    try:
        yield factory
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def file_session_factory(tmp_path):
    """File-backed SQLite with a seeded tenant, for tests that write from several threads."""
    engine = create_engine(
        f"sqlite:///{tmp_path / 'scheduling.db'}",
        connect_args={'check_same_thread': False},
    )
    Base.metadata.create_all(bind=engine)
    factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    session = factory()
    try:
        session.add(Tenant(id='tenant-1', name='North Flight School', slug='north'))
        session.commit()
        for user_id, role in (
            ('student-1', Role.STUDENT),
            ('student-2', Role.STUDENT),
            ('instructor-1', Role.INSTRUCTOR),
            ('admin-1', Role.ADMIN),
        ):
            _add_user(session, user_id, role)
    finally:
        session.close()

    try:
        yield factory
    finally:
        engine.dispose()


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def handles(session_factory):
    return build_handles(session_factory)


@pytest.fixture
def service(db, handles):
    return handles.booking_service(db)


@pytest.fixture
def tenant(db):
    record = Tenant(id='tenant-1', name='North Flight School', slug='north')
    other = Tenant(id='tenant-2', name='South Flight School', slug='south')
    db.add_all([record, other])
    db.commit()
    return record


def _add_user(db, user_id: str, role: Role, tenant_id: str = 'tenant-1') -> User:
    user = User(
        id=user_id,
        tenant_id=tenant_id,
        email=f'{user_id}@example.edu',
        first_name=user_id.split('-')[0].title(),
        last_name='Tester',
        role=role.value,
    )
    db.add(user)
    db.commit()
    return user


@pytest.fixture
def users(db, tenant):
    return {
        'student': _add_user(db, 'student-1', Role.STUDENT),
        'other_student': _add_user(db, 'student-2', Role.STUDENT),
        'instructor': _add_user(db, 'instructor-1', Role.INSTRUCTOR),
        'other_instructor': _add_user(db, 'instructor-2', Role.INSTRUCTOR),
        'admin': _add_user(db, 'admin-1', Role.ADMIN),
        'foreign_admin': _add_user(db, 'admin-9', Role.ADMIN, tenant_id='tenant-2'),
    }


def _identity(user: User) -> Identity:
    return Identity(user_id=user.id, role=user.role, tenant_id=user.tenant_id, email=user.email)


@pytest.fixture
def student(users):
    return _identity(users['student'])


@pytest.fixture
def other_student(users):
    return _identity(users['other_student'])


@pytest.fixture
def instructor(users):
    return _identity(users['instructor'])


@pytest.fixture
def admin(users):
    return _identity(users['admin'])


@pytest.fixture
def foreign_admin(users):
    return _identity(users['foreign_admin'])


@pytest.fixture
def tomorrow():
    """Returns a helper building naive UTC datetimes on tomorrow's date."""
    day = (utcnow() + timedelta(days=1)).date()

    def at(hour: int, minute: int = 0) -> datetime:
        return datetime(day.year, day.month, day.day, hour, minute)

    return at
