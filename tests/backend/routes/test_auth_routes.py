from backend.auth.dependencies import Identity
from backend.routes.auth_routes import me


def test_me_echoes_identity() -> None:
    identity = Identity(user_id='student-1', role='STUDENT', tenant_id='tenant-1', email='student@example.edu')

    assert me(identity=identity) == {
        'user_id': 'student-1',
        'email': 'student@example.edu',
        'role': 'STUDENT',
        'tenant_id': 'tenant-1',
    }
