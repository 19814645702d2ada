"""
Integration tests for admin login, registration and credential changes.
"""

from pos_app.models import AdminUser


class TestLogin:
    """Test login flow."""

    def test_login_with_default_admin(self, client):
        response = client.post('/api/login', json={
            'email': 'admin@srivelavancrackers.com',
            'password': 'admin123'
        })

        assert response.status_code == 200
        assert response.get_json() == {'message': 'Login successful'}

    def test_login_with_form_data(self, client):
        response = client.post('/api/login', data={
            'email': 'admin@srivelavancrackers.com',
            'password': 'admin123'
        })

        assert response.status_code == 200

    def test_login_wrong_password(self, client):
        response = client.post('/api/login', json={
            'email': 'admin@srivelavancrackers.com',
            'password': 'wrong'
        })

        assert response.status_code == 401
        assert response.get_json() == {'message': 'Invalid credentials'}

    def test_login_unknown_email(self, client):
        response = client.post('/api/login', json={'email': 'ghost@test.com', 'password': 'x'})

        assert response.status_code == 401


class TestRegistration:
    """Test admin registration."""

    def test_register_new_admin(self, client, session):
        response = client.post('/api/register', json={
            'email': 'cashier@test.com',
            'password': 'securepass123'
        })

        assert response.status_code == 200
        user = session.query(AdminUser).filter_by(email='cashier@test.com').first()
        assert user is not None
        assert user.password_hash != 'securepass123'

        login = client.post('/api/login', json={'email': 'cashier@test.com', 'password': 'securepass123'})
        assert login.status_code == 200

    def test_register_existing_email(self, client):
        response = client.post('/api/register', json={
            'email': 'admin@srivelavancrackers.com',
            'password': 'whatever'
        })

        assert response.status_code == 409
        assert response.get_json()['message'] == 'Email already registered'

    def test_register_blank_fields(self, client):
        response = client.post('/api/register', json={'email': '', 'password': ''})

        assert response.status_code == 400


class TestUpdateCredentials:
    """Test credential changes for the primary admin."""

    def test_update_credentials(self, client, session):
        response = client.put('/api/admin/credentials', json={
            'email': 'owner@srivelavancrackers.com',
            'password': 'n3w-pass'
        })

        assert response.status_code == 200
        assert session.query(AdminUser).count() == 1

        old = client.post('/api/login', json={'email': 'admin@srivelavancrackers.com', 'password': 'admin123'})
        new = client.post('/api/login', json={'email': 'owner@srivelavancrackers.com', 'password': 'n3w-pass'})
        assert old.status_code == 401
        assert new.status_code == 200

    def test_update_requires_both_fields(self, client):
        response = client.put('/api/admin/credentials', json={'email': 'owner@test.com'})

        assert response.status_code == 400
