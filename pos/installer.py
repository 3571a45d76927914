"""Point of sale installation routine"""
from datetime import datetime, time as clock_time, timezone
from zoneinfo import ZoneInfo
import time
import logging

logger = logging.getLogger(__name__)

INSTALLED_OPTION = 'pos_installed'
VERSION_OPTION = 'pos_version'
FLUSH_REWRITES_TRANSIENT = 'pos-flush-rewrites'

VENDOR_ROLES = ('seller', 'vendor_staff')
VENDOR_CAPABILITIES = ('publish_shop_orders', 'list_users')

DAILY_CRON_HOOK = 'pos_daily_midnight_cron'
DAILY_CRON_SCHEDULE = '0 0 * * *'
DAILY_CRON_GROUP = 'marketplace'

class Installer:
    """Record install data, grant vendor capabilities, reconcile the product
    log tables and schedule the daily job.

    Every step is idempotent, so running the installer again on an existing
    installation only refreshes the version and brings the schema and the
    schedule back in line. Collaborator errors propagate to the caller.
    """

    def __init__(self, options, transients, find_users_by_roles, schema, tables,
                 is_plugin_active, queue=None, version='0.0.0',
                 marketplace_plugin='marketplace', commerce_plugin='commerce',
                 timezone_name='UTC', clock=time.time):
        self.options = options
        self.transients = transients
        self.find_users_by_roles = find_users_by_roles
        self.schema = schema
        self.tables = tables
        self.is_plugin_active = is_plugin_active
        self.queue = queue
        self.version = version
        self.marketplace_plugin = marketplace_plugin
        self.commerce_plugin = commerce_plugin
        self.timezone_name = timezone_name
        self.clock = clock

    @classmethod
    def from_app(cls, app, **overrides):
        """Build an installer wired to the application's collaborators"""
        from pos.auth.user import User
        from pos.core.options import OptionStore, TransientStore
        from pos.jobs.queue import get_job_queue
        from pos.plugins.plugin import Plugin
        from pos.schema.schema_manager import SchemaManager
        from pos.schema.tables import declare_tables

        config = app.config
        kwargs = {
            'options': OptionStore(),
            'transients': TransientStore(),
            'find_users_by_roles': User.find_by_roles,
            'schema': SchemaManager(),
            'tables': declare_tables(
                prefix=config.get('POS_TABLE_PREFIX', ''),
                charset=config.get('DB_CHARSET'),
                collate=config.get('DB_COLLATE')
            ),
            'is_plugin_active': Plugin.is_active,
            'queue': get_job_queue(app),
            'version': config['POS_VERSION'],
            'marketplace_plugin': config.get('POS_MARKETPLACE_PLUGIN', 'marketplace'),
            'commerce_plugin': config.get('POS_COMMERCE_PLUGIN', 'commerce'),
            'timezone_name': config.get('POS_TIMEZONE', 'UTC'),
        }
        kwargs.update(overrides)
        return cls(**kwargs)

    def run(self):
        """Run the installer"""
        logger.info(f"Running point of sale installer v{self.version}")
        self.add_installation_data()
        self.add_user_roles()
        self.flush_rewrites()
        self.create_tables()
        self.schedule_cron_jobs()
        logger.info("Point of sale installer finished")

    def add_installation_data(self):
        """Record the first install time and the running version"""
        installed = self.options.get(INSTALLED_OPTION)

        if not installed:
            self.options.set(INSTALLED_OPTION, int(self.clock()))

        self.options.set(VERSION_OPTION, self.version)

    def add_user_roles(self):
        """Grant order capabilities to marketplace vendors"""
        if not self.is_plugin_active(self.marketplace_plugin):
            logger.debug(f"Plugin {self.marketplace_plugin} is not active - skipping vendor capabilities")
            return

        users = self.find_users_by_roles(VENDOR_ROLES)
        for user in users:
            for capability in VENDOR_CAPABILITIES:
                user.add_capability(capability)

        logger.info(f"Vendor capabilities checked for {len(users)} user(s)")

    def flush_rewrites(self):
        """Ask for the routing rules to be regenerated on the next request"""
        self.transients.set(FLUSH_REWRITES_TRANSIENT, 1)

    def create_tables(self):
        """Create or reconcile the product log tables"""
        for table in self.tables:
            self.schema.reconcile(table)

    def schedule_cron_jobs(self):
        """Ensure exactly one pending daily midnight occurrence exists"""
        if not self.is_plugin_active(self.commerce_plugin) or self.queue is None:
            logger.debug("Commerce job queue not available - skipping cron schedule")
            return

        existing = self.queue.next_scheduled(DAILY_CRON_HOOK)
        if existing is not None:
            logger.info(f"Replacing scheduled {DAILY_CRON_HOOK} (next run {existing})")
        self.queue.unschedule_all(DAILY_CRON_HOOK)

        self.queue.schedule_cron(self.midnight(), DAILY_CRON_SCHEDULE, DAILY_CRON_HOOK, [], DAILY_CRON_GROUP)

    def midnight(self):
        """Epoch timestamp of today's midnight in the site timezone"""
        tz = ZoneInfo(self.timezone_name)
        today = datetime.fromtimestamp(self.clock(), tz=tz).date()
        # A skipped midnight resolves to the first instant that exists that day
        midnight = datetime.combine(today, clock_time(0), tzinfo=tz).astimezone(timezone.utc)
        return int(midnight.timestamp())
