"""User model, roles and capability grants"""
from flask_login import UserMixin, AnonymousUserMixin
from werkzeug.security import generate_password_hash, check_password_hash
from pos import db
from pos.core.db import BaseModel, JSONType
from pos.auth.capability import DEFAULT_ROLES
from datetime import datetime
import logging

logger = logging.getLogger(__name__)

# Association table for user-role relationship
user_roles = db.Table('user_roles',
    db.Column('user_id', db.Integer, db.ForeignKey('users.id'), primary_key=True),
    db.Column('role_id', db.Integer, db.ForeignKey('roles.id'), primary_key=True)
)

class User(UserMixin, BaseModel):
    """User model for authentication and authorization"""
    __tablename__ = 'users'

    # User identification
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    username = db.Column(db.String(64), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(256))

    # User profile
    first_name = db.Column(db.String(64))
    last_name = db.Column(db.String(64))
    is_active = db.Column(db.Boolean, default=True)
    is_system_admin = db.Column(db.Boolean, default=False)

    # Capabilities granted to this user directly, on top of their roles
    capabilities = db.Column(JSONType, default=list)

    # User metadata
    last_login = db.Column(db.DateTime)

    # Relationships
    roles = db.relationship('Role', secondary=user_roles, lazy='subquery',
                           backref=db.backref('users', lazy=True))

    def __repr__(self):
        return f'<User {self.username}>'

    @property
    def password(self):
        """Prevent password from being accessed"""
        raise AttributeError('password is not a readable attribute')

    @password.setter
    def password(self, password):
        """Set password hash"""
        self.password_hash = generate_password_hash(password)

    def verify_password(self, password):
        """Check if password matches"""
        return check_password_hash(self.password_hash, password)

    def has_capability(self, capability):
        """Check if user has a specific capability"""
        # System admins have all capabilities
        if self.is_system_admin:
            return True

        if capability in (self.capabilities or []):
            return True

        # Check if any of the user's roles have the capability
        return any(role.has_capability(capability) for role in self.roles)

    def has_role(self, role_name):
        """Check if user has a specific role"""
        return any(role.name == role_name for role in self.roles)

    def add_capability(self, capability):
        """Grant a capability to the user; granting twice is a no-op"""
        current = list(self.capabilities or [])
        if capability in current:
            return False

        # Reassign so the JSON column is flagged as modified
        self.capabilities = current + [capability]
        try:
            db.session.commit()
            logger.info(f"Capability {capability} added to user {self.username}")
            return True
        except Exception as e:
            db.session.rollback()
            logger.error(f"Error adding capability {capability} to user {self.username}: {str(e)}")
            raise

    def remove_capability(self, capability):
        """Revoke a capability granted directly to the user"""
        current = list(self.capabilities or [])
        if capability not in current:
            return False

        current.remove(capability)
        self.capabilities = current
        try:
            db.session.commit()
            logger.info(f"Capability {capability} removed from user {self.username}")
            return True
        except Exception as e:
            db.session.rollback()
            logger.error(f"Error removing capability {capability} from user {self.username}: {str(e)}")
            raise

    @staticmethod
    def find_by_roles(role_names):
        """Get all users holding any of the given roles"""
        return User.query.join(User.roles).filter(
            Role.name.in_(list(role_names))
        ).distinct().order_by(User.id).all()

    @staticmethod
    def create_user(email, username, password, first_name=None, last_name=None,
                    roles=None, is_system_admin=False):
        """Create a new user"""
        user = User(
            email=email,
            username=username,
            first_name=first_name,
            last_name=last_name,
            is_system_admin=is_system_admin,
            capabilities=[]
        )
        user.password = password

        for role_name in roles or []:
            role = Role.query.filter_by(name=role_name).first()
            if role is None:
                raise ValueError(f"Unknown role: {role_name}")
            user.roles.append(role)

        try:
            db.session.add(user)
            db.session.commit()
            logger.info(f"User created: {username}")
            return user
        except Exception as e:
            db.session.rollback()
            logger.error(f"Error creating user: {str(e)}")
            raise

    def update_last_login(self):
        """Update last login timestamp"""
        self.last_login = datetime.utcnow()
        db.session.commit()

class Role(BaseModel):
    """Role model for role-based access control"""
    __tablename__ = 'roles'

    name = db.Column(db.String(64), unique=True, nullable=False)
    description = db.Column(db.String(255))
    capabilities = db.Column(JSONType, default=list)
    is_system_role = db.Column(db.Boolean, default=False)

    def __repr__(self):
        return f'<Role {self.name}>'

    def has_capability(self, capability):
        """Check if role has a specific capability"""
        return capability in (self.capabilities or [])

    def add_capability(self, capability):
        """Add a capability to the role"""
        if not self.has_capability(capability):
            self.capabilities = list(self.capabilities or []) + [capability]
            db.session.commit()
            logger.info(f"Capability {capability} added to role {self.name}")

    def remove_capability(self, capability):
        """Remove a capability from the role"""
        if self.has_capability(capability):
            self.capabilities = [c for c in self.capabilities if c != capability]
            db.session.commit()
            logger.info(f"Capability {capability} removed from role {self.name}")

    @staticmethod
    def create_role(name, description=None, capabilities=None):
        """Create a role if it does not exist yet"""
        role = Role.query.filter_by(name=name).first()
        if role is not None:
            return role

        role = Role(name=name, description=description, capabilities=list(capabilities or []))
        try:
            db.session.add(role)
            db.session.commit()
            logger.info(f"Role created: {name}")
            return role
        except Exception as e:
            db.session.rollback()
            logger.error(f"Error creating role {name}: {str(e)}")
            raise

    @staticmethod
    def insert_default_roles():
        """Insert default roles"""
        for role_name, role_data in DEFAULT_ROLES.items():
            role = Role.query.filter_by(name=role_name).first()
            if role is None:
                role = Role(
                    name=role_name,
                    description=role_data['description'],
                    capabilities=list(role_data['capabilities']),
                    is_system_role=role_data['is_system_role']
                )
                db.session.add(role)
                logger.info(f"Default role created: {role_name}")

        db.session.commit()

class AnonymousUser(AnonymousUserMixin):
    """Anonymous user class with default capability methods"""

    def has_capability(self, capability):
        """Anonymous users have no capabilities"""
        return False

    def has_role(self, role_name):
        """Anonymous users have no roles"""
        return False

    @property
    def is_system_admin(self):
        """Anonymous users are not system admins"""
        return False
