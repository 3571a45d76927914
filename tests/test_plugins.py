from sqlalchemy import inspect

from pos import db
from pos.core.options import OptionStore
from pos.installer import INSTALLED_OPTION, DAILY_CRON_HOOK
from pos.jobs.queue import get_job_queue
from pos.plugins.plugin import Plugin, PluginStatus
from pos.plugins.plugin_manager import PluginManager


def test_is_active(app, activate_marker):
    assert Plugin.is_active('marketplace') is False

    Plugin.register_plugin(name='Marketplace', slug='marketplace', version='1.0.0')
    assert Plugin.is_active('marketplace') is False

    activate_marker('marketplace')
    assert Plugin.is_active('marketplace') is True


def test_register_builtin_plugins_is_idempotent(app):
    manager = PluginManager()
    manager.register_builtin_plugins()
    manager.register_builtin_plugins()

    plugin = Plugin.query.filter_by(slug='point-of-sale').one()
    assert plugin.status == PluginStatus.INACTIVE.value
    assert plugin.module_path == 'pos.point_of_sale'
    assert plugin.module_attr == 'PointOfSalePlugin'


def test_register_keeps_status(app, activate_marker):
    activate_marker('commerce')
    Plugin.register_plugin(name='Commerce', slug='commerce', version='2.0.0')

    assert Plugin.is_active('commerce')
    assert Plugin.query.filter_by(slug='commerce').one().version == '2.0.0'


def test_activating_point_of_sale_runs_installer(app):
    manager = PluginManager()
    manager.register_builtin_plugins()

    assert manager.activate_plugin('point-of-sale') is True

    assert Plugin.is_active('point-of-sale')
    assert OptionStore().get(INSTALLED_OPTION) is not None
    assert inspect(db.engine).has_table('pos_product_logs')


def test_activation_failure_keeps_plugin_inactive(app, monkeypatch):
    manager = PluginManager()
    manager.register_builtin_plugins()

    def broken_run(self):
        raise RuntimeError('disk full')

    monkeypatch.setattr('pos.installer.Installer.run', broken_run)

    assert manager.activate_plugin('point-of-sale') is False
    assert Plugin.query.filter_by(slug='point-of-sale').one().status == PluginStatus.INACTIVE.value


def test_unknown_plugin(app):
    manager = PluginManager()
    assert manager.activate_plugin('nope') is False
    assert manager.deactivate_plugin('nope') is False


def test_bad_entry_point_marks_error(app):
    Plugin.register_plugin(name='Broken', slug='broken', version='1.0.0',
                           entry_point='pos.does_not_exist:Plugin')

    assert PluginManager().activate_plugin('broken') is False
    assert Plugin.query.filter_by(slug='broken').one().status == PluginStatus.ERROR.value


def test_deactivate_unschedules_daily_job(queue_app, activate_marker):
    activate_marker('commerce')
    manager = PluginManager()
    manager.register_builtin_plugins()
    manager.activate_plugin('point-of-sale')

    queue = get_job_queue(queue_app)
    assert queue.next_scheduled(DAILY_CRON_HOOK) is not None

    assert manager.deactivate_plugin('point-of-sale') is True
    assert queue.next_scheduled(DAILY_CRON_HOOK) is None
    assert not Plugin.is_active('point-of-sale')
