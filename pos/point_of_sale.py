"""Point of sale plugin"""
from flask import current_app
from pos import __version__
from pos.installer import Installer, DAILY_CRON_HOOK
from pos.jobs.queue import get_job_queue
import logging

logger = logging.getLogger(__name__)

def setup():
    """Setup function called during plugin registration"""
    return {
        'name': 'Point of Sale',
        'slug': 'point-of-sale',
        'version': __version__,
        'description': 'Point of sale for the shop and marketplace vendors',
        'author': 'POS Team',
        'homepage': 'https://example.com/pos',
        'entry_point': 'pos.point_of_sale:PointOfSalePlugin',
        'config_schema': {},
        'is_system': False
    }

class PointOfSalePlugin:
    """Point of sale plugin class"""

    def __init__(self, config=None):
        """Initialize the plugin with configuration"""
        self.config = config or {}

    def activate(self):
        """Run the installer when the plugin is activated"""
        Installer.from_app(current_app).run()

    def deactivate(self):
        """Drop the pending daily job when the plugin is deactivated"""
        queue = get_job_queue()
        if queue is not None:
            queue.unschedule_all(DAILY_CRON_HOOK)
