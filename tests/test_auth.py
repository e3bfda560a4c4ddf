"""
Authentication Tests
"""
from docbridge.auth import load_user


class TestSessionIdentity:
    """Test resolving the Flask-Login session to a user"""

    def test_load_user(self, app, test_user):
        with app.app_context():
            user = load_user(str(test_user.id))
            assert user is not None
            assert user.email == 'test@example.com'

    def test_load_unknown_user(self, app):
        with app.app_context():
            assert load_user('999999') is None

    def test_load_garbage_id(self, app):
        with app.app_context():
            assert load_user('not-a-number') is None

    def test_unauthenticated_api_gets_json_401(self, client):
        """API routes answer 401 JSON instead of redirecting to a login page"""
        response = client.delete('/api/history/1')
        assert response.status_code == 401
        assert response.is_json
        assert response.get_json()['error'] == 'Authentication required'

    def test_authenticated_session(self, authenticated_client):
        response = authenticated_client.get('/api/history')
        assert response.status_code == 200
        assert response.get_json()['stats']['count'] == 0
