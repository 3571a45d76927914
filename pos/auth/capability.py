"""Capability definitions for role-based access control"""

class Capability:
    """Capability names granted to roles and users"""

    # Site administration
    MANAGE_OPTIONS = 'manage_options'
    ACTIVATE_PLUGINS = 'activate_plugins'

    # Users
    LIST_USERS = 'list_users'
    CREATE_USERS = 'create_users'
    EDIT_USERS = 'edit_users'

    # Shop
    MANAGE_POS = 'manage_pos'
    PUBLISH_SHOP_ORDERS = 'publish_shop_orders'
    EDIT_SHOP_ORDERS = 'edit_shop_orders'
    READ_PRODUCTS = 'read_products'

    @classmethod
    def all_capabilities(cls):
        """Get all available capabilities"""
        capabilities = []
        for attr_name in dir(cls):
            if not attr_name.startswith('_') and isinstance(getattr(cls, attr_name), str):
                capabilities.append(getattr(cls, attr_name))
        return capabilities

# Roles created by the host; marketplace roles come from the marketplace plugin
DEFAULT_ROLES = {
    'administrator': {
        'description': 'Administrator with full access',
        'capabilities': Capability.all_capabilities(),
        'is_system_role': True
    },
    'shop_manager': {
        'description': 'Manages the shop and point of sale',
        'capabilities': [
            Capability.LIST_USERS,
            Capability.MANAGE_POS,
            Capability.PUBLISH_SHOP_ORDERS,
            Capability.EDIT_SHOP_ORDERS,
            Capability.READ_PRODUCTS
        ],
        'is_system_role': True
    },
    'customer': {
        'description': 'Shop customer',
        'capabilities': [
            Capability.READ_PRODUCTS
        ],
        'is_system_role': True
    }
}
