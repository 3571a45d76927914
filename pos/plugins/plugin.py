"""Plugin model and plugin presence checks"""
from pos import db
from pos.core.db import BaseModel, JSONType
from enum import Enum
import importlib
import logging

logger = logging.getLogger(__name__)

class PluginStatus(Enum):
    """Plugin status enumeration"""
    ACTIVE = 'active'
    INACTIVE = 'inactive'
    ERROR = 'error'
    PENDING = 'pending'

class Plugin(BaseModel):
    """Plugin model for registering available plugins"""
    __tablename__ = 'plugins'

    # Plugin identification
    name = db.Column(db.String(100), nullable=False)
    slug = db.Column(db.String(100), nullable=False, unique=True, index=True)
    version = db.Column(db.String(20), nullable=False)

    # Plugin details
    description = db.Column(db.Text, nullable=True)
    author = db.Column(db.String(100), nullable=True)
    homepage = db.Column(db.String(255), nullable=True)

    # Plugin configuration
    entry_point = db.Column(db.String(255), nullable=True)
    config_schema = db.Column(JSONType, default=dict)

    # Plugin status
    status = db.Column(db.String(20), default=PluginStatus.PENDING.value)
    is_system = db.Column(db.Boolean, default=False)

    def __repr__(self):
        return f'<Plugin {self.name} v{self.version}>'

    @property
    def module_path(self):
        """Get the module path for the plugin"""
        return self.entry_point.split(':')[0] if ':' in self.entry_point else self.entry_point

    @property
    def module_attr(self):
        """Get the module attribute/function for the plugin"""
        return self.entry_point.split(':')[1] if ':' in self.entry_point else 'plugin'

    @property
    def active(self):
        return self.status == PluginStatus.ACTIVE.value

    @staticmethod
    def is_active(slug):
        """Check whether the plugin with the given slug is registered and active"""
        plugin = Plugin.query.filter_by(slug=slug).first()
        return plugin is not None and plugin.active

    def load(self):
        """Load the plugin class, or None when it cannot be imported"""
        if not self.entry_point:
            logger.error(f"Plugin {self.name} has no entry point")
            return None

        try:
            logger.debug(f"Attempting to import module: {self.module_path}")
            module = importlib.import_module(self.module_path)
        except ImportError as e:
            logger.error(f"Failed to load plugin {self.name}: {str(e)}")
            self.status = PluginStatus.ERROR.value
            db.session.commit()
            return None

        if not hasattr(module, self.module_attr):
            logger.error(f"Plugin {self.name} doesn't have {self.module_attr} attribute")
            self.status = PluginStatus.ERROR.value
            db.session.commit()
            return None

        logger.info(f"Successfully loaded plugin: {self.name}")
        return getattr(module, self.module_attr)

    @staticmethod
    def register_plugin(name, slug, version, entry_point=None, description=None,
                        author=None, homepage=None, config_schema=None,
                        is_system=False, status=None):
        """Register a new plugin or update an existing one"""
        # Check if plugin already exists
        existing_plugin = Plugin.query.filter_by(slug=slug).first()
        if existing_plugin:
            # Update existing plugin, keeping its status unless one is given
            existing_plugin.name = name
            existing_plugin.version = version
            existing_plugin.description = description
            existing_plugin.author = author
            existing_plugin.homepage = homepage
            existing_plugin.entry_point = entry_point
            existing_plugin.config_schema = config_schema or {}
            existing_plugin.is_system = is_system
            if status:
                existing_plugin.status = status

            db.session.commit()
            logger.info(f"Updated plugin: {name} v{version}")
            return existing_plugin

        # Create new plugin
        plugin = Plugin(
            name=name,
            slug=slug,
            version=version,
            description=description,
            author=author,
            homepage=homepage,
            entry_point=entry_point,
            config_schema=config_schema or {},
            is_system=is_system,
            status=status or PluginStatus.INACTIVE.value
        )

        try:
            db.session.add(plugin)
            db.session.commit()
            logger.info(f"Registered plugin: {name} v{version}")
            return plugin

        except Exception as e:
            db.session.rollback()
            logger.error(f"Error registering plugin {name}: {str(e)}")
            raise
