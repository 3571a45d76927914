"""Routing rule regeneration requested through a transient flag"""
from flask import current_app
from pos import db
from pos.core.options import TransientStore
from pos.installer import FLUSH_REWRITES_TRANSIENT
import logging

logger = logging.getLogger(__name__)

def _unbound_copy(rule):
    copy = rule.empty()
    # Set by Flask on add_url_rule, not part of the rule's own arguments
    copy.provide_automatic_options = getattr(rule, 'provide_automatic_options', False)
    return copy

def flush_rewrite_rules(app):
    """Rebuild the application's URL map from unbound copies of its rules"""
    old = app.url_map
    rules = [_unbound_copy(rule) for rule in old.iter_rules()]
    app.url_map = type(old)(
        rules,
        default_subdomain=old.default_subdomain,
        strict_slashes=old.strict_slashes,
        merge_slashes=old.merge_slashes,
        redirect_defaults=old.redirect_defaults,
        converters=old.converters,
        sort_parameters=old.sort_parameters,
        sort_key=old.sort_key,
        host_matching=old.host_matching,
    )
    logger.info(f"Routing rules regenerated ({len(rules)} rules)")

def consume_flush_request(app, transients=None):
    """Flush routing rules once if the flag is set, returning whether it was"""
    transients = transients or TransientStore()
    if not transients.get(FLUSH_REWRITES_TRANSIENT):
        return False

    transients.delete(FLUSH_REWRITES_TRANSIENT)
    flush_rewrite_rules(app)
    return True

def register_rewrite_flush(app):
    """Check for a pending flush before each request"""

    @app.before_request
    def flush_rewrites_if_requested():
        try:
            consume_flush_request(current_app._get_current_object())
        except Exception as e:
            db.session.rollback()
            # Options tables may not exist yet on a fresh database
            current_app.logger.error(f"Error checking routing flush: {str(e)}")
