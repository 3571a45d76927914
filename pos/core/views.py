from flask import Blueprint, jsonify, current_app
from pos.auth.capability import Capability
from pos.auth.rbac import capability_required, role_required
from pos.core.error_handlers import ApiError
from pos.core.options import OptionStore
from pos.installer import Installer, INSTALLED_OPTION, VERSION_OPTION, DAILY_CRON_HOOK
from pos.jobs.queue import get_job_queue
import logging

logger = logging.getLogger(__name__)

main_bp = Blueprint('main', __name__)

def installation_status():
    """Install record and next daily run"""
    options = OptionStore()
    queue = get_job_queue()
    return {
        'installed': options.get(INSTALLED_OPTION),
        'version': options.get(VERSION_OPTION),
        'next_daily_run': queue.next_scheduled(DAILY_CRON_HOOK) if queue else None
    }

@main_bp.route('/health')
def health_check():
    """Health check endpoint"""
    return {'status': 'ok', 'message': 'Service is running'}

@main_bp.route('/api/pos/status', methods=['GET'])
@capability_required(Capability.MANAGE_OPTIONS)
def pos_status():
    """Installation status of the point of sale plugin"""
    return jsonify({
        'status': 'success',
        'data': installation_status()
    })

@main_bp.route('/api/pos/install', methods=['POST'])
@role_required('administrator')
def pos_install():
    """Re-run the installer"""
    try:
        Installer.from_app(current_app).run()
    except Exception as e:
        logger.error(f"Installer failed: {str(e)}")
        raise ApiError(f"Installation failed: {str(e)}", status_code=500)

    logger.info("Installer run from API")
    return jsonify({
        'status': 'success',
        'data': installation_status()
    })
