import pytest

from pos import create_app, db
from pos.auth.user import Role, User
from pos.plugins.plugin import Plugin, PluginStatus


def _make_app(tmp_path, **overrides):
    config = {'SQLALCHEMY_DATABASE_URI': f"sqlite:///{tmp_path / 'pos.db'}"}
    config.update(overrides)
    return create_app('testing', config)


@pytest.fixture
def app(tmp_path):
    """Application without a job queue, backed by a fresh SQLite file."""
    app = _make_app(tmp_path)
    with app.app_context():
        db.create_all()
        Role.insert_default_roles()
        yield app
        db.session.remove()
        db.engine.dispose()


@pytest.fixture
def queue_app(tmp_path):
    """Application with the job queue enabled."""
    app = _make_app(tmp_path, POS_JOB_QUEUE_ENABLED=True)
    with app.app_context():
        db.create_all()
        Role.insert_default_roles()
        yield app
        db.session.remove()
        db.engine.dispose()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def vendor_roles(app):
    return [
        Role.create_role('seller', 'Marketplace vendor'),
        Role.create_role('vendor_staff', 'Marketplace vendor staff'),
    ]


@pytest.fixture
def make_user(app):
    def _make_user(username, roles=None, **kwargs):
        return User.create_user(
            email=f'{username}@example.com',
            username=username,
            password='secret',
            roles=roles,
            **kwargs
        )
    return _make_user


@pytest.fixture
def activate_marker():
    """Register a code-less plugin as active, e.g. the marketplace."""
    def _activate(slug):
        return Plugin.register_plugin(
            name=slug.title(), slug=slug, version='1.0.0',
            status=PluginStatus.ACTIVE.value
        )
    return _activate


@pytest.fixture
def login(client):
    def _login(user):
        with client.session_transaction() as sess:
            sess['_user_id'] = str(user.id)
            sess['_fresh'] = True
    return _login
