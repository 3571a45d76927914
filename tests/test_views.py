from pos import db
from pos.auth.user import User
from pos.core.options import OptionStore, TransientStore
from pos.core.rewrites import flush_rewrite_rules
from pos.installer import INSTALLED_OPTION, FLUSH_REWRITES_TRANSIENT


def test_health(client):
    response = client.get('/health')
    assert response.status_code == 200
    assert response.get_json()['status'] == 'ok'


def test_status_requires_login(client):
    response = client.get('/api/pos/status')
    assert response.status_code == 401
    assert response.get_json()['code'] == 401


def test_status_requires_capability(client, make_user, login):
    login(make_user('cust', roles=['customer']))

    response = client.get('/api/pos/status')
    assert response.status_code == 403


def test_status_reports_install_record(client, make_user, login):
    OptionStore().set(INSTALLED_OPTION, 1234)
    OptionStore().set('pos_version', '1.2.0')
    login(make_user('admin', roles=['administrator']))

    response = client.get('/api/pos/status')

    assert response.status_code == 200
    assert response.get_json()['data'] == {
        'installed': 1234,
        'version': '1.2.0',
        'next_daily_run': None,
    }


def test_install_requires_administrator(client, make_user, login):
    login(make_user('manager', roles=['shop_manager']))

    response = client.post('/api/pos/install')
    assert response.status_code == 403


def test_install_runs_installer(client, make_user, login):
    login(make_user('admin', roles=['administrator']))

    response = client.post('/api/pos/install')

    assert response.status_code == 200
    data = response.get_json()['data']
    assert data['installed'] is not None
    assert data['version'] == '1.2.0'


def test_install_failure_is_reported(client, make_user, login, monkeypatch):
    login(make_user('admin', roles=['administrator']))

    def broken_run(self):
        raise RuntimeError('disk full')

    monkeypatch.setattr('pos.installer.Installer.run', broken_run)

    response = client.post('/api/pos/install')

    assert response.status_code == 500
    assert response.get_json()['message'] == 'Installation failed: disk full'


def test_unknown_route_returns_json(client):
    response = client.get('/nowhere')
    assert response.status_code == 404
    assert response.get_json()['message'] == 'Resource not found'


def test_flush_flag_consumed_on_next_request(client, caplog):
    TransientStore().set(FLUSH_REWRITES_TRANSIENT, 1)

    with caplog.at_level('INFO', logger='pos'):
        client.get('/health')
        client.get('/health')

    assert TransientStore().get(FLUSH_REWRITES_TRANSIENT) is None
    flushes = [r for r in caplog.records if 'Routing rules regenerated' in r.getMessage()]
    assert len(flushes) == 1


def test_login_grants_access_to_status(client, make_user):
    make_user('admin', roles=['administrator'])

    response = client.post('/api/auth/login', json={'username': 'admin', 'password': 'secret'})

    assert response.status_code == 200
    assert response.get_json()['data']['roles'] == ['administrator']
    db.session.expire_all()
    assert User.query.filter_by(username='admin').one().last_login is not None
    assert client.get('/api/pos/status').status_code == 200

    assert client.post('/api/auth/logout').status_code == 200
    assert client.get('/api/pos/status').status_code == 401


def test_login_by_email(client, make_user):
    make_user('manager', roles=['shop_manager'])

    response = client.post('/api/auth/login',
                           json={'username': 'manager@example.com', 'password': 'secret'})
    assert response.status_code == 200


def test_login_rejects_bad_credentials(client, make_user):
    make_user('admin', roles=['administrator'])

    response = client.post('/api/auth/login', json={'username': 'admin', 'password': 'wrong'})
    assert response.status_code == 401
    assert client.post('/api/auth/login', json={}).status_code == 400
    assert client.get('/api/pos/status').status_code == 401


def test_flush_rebuilds_routing_map(app, client):
    def describe(url_map):
        return sorted((rule.rule, rule.endpoint, tuple(sorted(rule.methods))) for rule in url_map.iter_rules())

    old_map = app.url_map
    before = describe(old_map)

    flush_rewrite_rules(app)

    assert app.url_map is not old_map
    assert describe(app.url_map) == before
    assert client.get('/health').status_code == 200
    assert client.options('/health').status_code == 200
    assert client.get('/nowhere').status_code == 404
