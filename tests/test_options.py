from datetime import datetime, timedelta

from pos import db
from pos.core.options import OptionStore, TransientStore, Transient


def test_option_get_default_when_missing(app):
    options = OptionStore()
    assert options.get('missing') is None
    assert options.get('missing', 'fallback') == 'fallback'


def test_option_set_overwrites(app):
    options = OptionStore()
    options.set('pos_version', '1.0.0')
    options.set('pos_version', '1.1.0')

    assert options.get('pos_version') == '1.1.0'


def test_option_stores_json_values(app):
    options = OptionStore()
    options.set('pos_settings', {'receipt': {'footer': 'Thanks'}, 'tills': [1, 2]})

    assert options.get('pos_settings') == {'receipt': {'footer': 'Thanks'}, 'tills': [1, 2]}


def test_option_delete(app):
    options = OptionStore()
    options.set('pos_installed', 1)

    assert options.delete('pos_installed') is True
    assert options.delete('pos_installed') is False
    assert options.get('pos_installed') is None


def test_transient_roundtrip_and_delete(app):
    transients = TransientStore()
    transients.set('pos-flush-rewrites', 1)

    assert transients.get('pos-flush-rewrites') == 1
    assert transients.delete('pos-flush-rewrites') is True
    assert transients.get('pos-flush-rewrites') is None


def test_expired_transient_reads_as_absent(app):
    transients = TransientStore()
    transients.set('pos-cache', 'value', expiration=60)

    transient = Transient.query.filter_by(name='pos-cache').one()
    transient.expires_at = datetime.utcnow() - timedelta(seconds=1)
    db.session.commit()

    assert transients.get('pos-cache') is None
    assert Transient.query.filter_by(name='pos-cache').count() == 0


def test_transient_without_expiration_never_expires(app):
    transients = TransientStore()
    transients.set('pos-flag', True)

    assert Transient.query.filter_by(name='pos-flag').one().expires_at is None
    assert transients.get('pos-flag') is True
