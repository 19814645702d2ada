"""
Integration tests for application-level routes: health, metrics, frontend and error pages.
"""


class TestHealth:

    def test_health(self, client):
        response = client.get('/health')

        assert response.status_code == 200
        assert response.get_json() == {'status': 'healthy', 'database': 'connected'}


class TestMetrics:

    def test_bill_counters_exposed(self, client, products, payload_factory):
        line = {'id': 'P1', 'name': 'Rocket Bomb', 'quantity': 1, 'price': 10}
        client.post('/api/bills', json=payload_factory([line]))

        response = client.get('/metrics')

        assert response.status_code == 200
        assert b'pos_bills_created_total' in response.data
        assert b'pos_http_requests_total' in response.data


class TestFrontend:

    def test_index_served(self, client):
        response = client.get('/')

        assert response.status_code == 200
        assert b'POS' in response.data

    def test_client_side_route_falls_back_to_index(self, client):
        response = client.get('/billing/history')

        assert response.status_code == 200
        assert b'POS' in response.data

    def test_unknown_api_route_is_json_404(self, client):
        response = client.get('/api/nothing-here')

        assert response.status_code == 404
        assert response.get_json() == {'message': 'Not Found'}

    def test_method_not_allowed(self, client):
        response = client.patch('/api/bills')

        assert response.status_code == 405
        assert response.get_json() == {'message': 'Method Not Allowed'}


class TestCliCommands:

    def test_init_db_is_idempotent(self, app, session):
        runner = app.test_cli_runner()

        result = runner.invoke(args=['init-db'])

        assert result.exit_code == 0
        assert 'Database initialized' in result.output
        assert 'Admins created: 0' in result.output
        assert 'Categories created: 0' in result.output

    def test_create_admin(self, app, session):
        from pos_app.models import AdminUser

        runner = app.test_cli_runner()
        result = runner.invoke(args=['create-admin', '--email', 'cashier@test.com', '--password', 'secret1'])

        assert result.exit_code == 0
        assert 'Admin created successfully!' in result.output
        assert session.query(AdminUser).filter_by(email='cashier@test.com').count() == 1

    def test_create_admin_rejects_short_password(self, app, session):
        runner = app.test_cli_runner()
        result = runner.invoke(args=['create-admin', '--email', 'cashier@test.com', '--password', '123'])

        assert 'at least 6 characters' in result.output
