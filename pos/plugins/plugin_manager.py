"""Plugin registration and lifecycle management"""
from pos import db
from pos.plugins.plugin import Plugin, PluginStatus
import importlib
import logging

logger = logging.getLogger(__name__)

# Modules exposing a setup() function that returns plugin metadata
BUILTIN_PLUGINS = ['pos.point_of_sale']

class PluginManager:
    """Manages plugin registration and lifecycle"""

    def __init__(self):
        """Initialize the plugin manager"""
        self.plugin_instances = {}

    def register_builtin_plugins(self):
        """Register the plugins shipped with the application"""
        registered = []
        for module_name in BUILTIN_PLUGINS:
            module = importlib.import_module(module_name)
            metadata = module.setup()
            if not metadata:
                logger.warning(f"Plugin {module_name} setup() function returned no metadata")
                continue

            plugin = Plugin.register_plugin(
                name=metadata.get('name', module_name),
                slug=metadata.get('slug', module_name.rsplit('.', 1)[-1]),
                version=metadata.get('version', '0.1.0'),
                entry_point=metadata.get('entry_point'),
                description=metadata.get('description'),
                author=metadata.get('author'),
                homepage=metadata.get('homepage'),
                config_schema=metadata.get('config_schema'),
                is_system=metadata.get('is_system', False)
            )
            registered.append(plugin)

        logger.info(f"Registered {len(registered)} built-in plugins")
        return registered

    def get_plugin_instance(self, plugin_slug):
        """Get an instance of the plugin"""
        if plugin_slug in self.plugin_instances:
            return self.plugin_instances[plugin_slug]

        plugin = Plugin.query.filter_by(slug=plugin_slug).first()
        if not plugin:
            logger.error(f"Plugin {plugin_slug} not found")
            return None

        # Plugins registered without code (presence markers) have no instance
        if not plugin.entry_point:
            return None

        plugin_class = plugin.load()
        if not plugin_class:
            return None

        instance = plugin_class(plugin.config_schema)
        self.plugin_instances[plugin_slug] = instance
        return instance

    def activate_plugin(self, plugin_slug):
        """Activate a plugin, running its activation hook"""
        plugin = Plugin.query.filter_by(slug=plugin_slug).first()
        if not plugin:
            logger.error(f"Plugin {plugin_slug} not found")
            return False

        try:
            logger.info(f"Activating plugin {plugin_slug}. Current status: {plugin.status}")

            if plugin.entry_point:
                instance = self.get_plugin_instance(plugin_slug)
                if instance is None:
                    logger.error(f"Failed to load plugin {plugin_slug}")
                    return False
                if hasattr(instance, 'activate'):
                    instance.activate()

            plugin.status = PluginStatus.ACTIVE.value
            db.session.commit()

            logger.info(f"Activated plugin: {plugin.name}")
            return True
        except Exception as e:
            db.session.rollback()
            logger.error(f"Error activating plugin {plugin_slug}: {str(e)}")
            return False

    def deactivate_plugin(self, plugin_slug):
        """Deactivate a plugin, running its deactivation hook"""
        plugin = Plugin.query.filter_by(slug=plugin_slug).first()
        if not plugin:
            logger.error(f"Plugin {plugin_slug} not found")
            return False

        try:
            if plugin.entry_point:
                instance = self.get_plugin_instance(plugin_slug)
                if instance is not None and hasattr(instance, 'deactivate'):
                    instance.deactivate()

            plugin.status = PluginStatus.INACTIVE.value
            db.session.commit()

            logger.info(f"Deactivated plugin: {plugin.name}")

            # Remove any instances
            self.plugin_instances.pop(plugin_slug, None)
            return True
        except Exception as e:
            db.session.rollback()
            logger.error(f"Error deactivating plugin {plugin_slug}: {str(e)}")
            return False
