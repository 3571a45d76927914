"""Persistent site options and expiring transients"""
from datetime import datetime, timedelta
from pos import db
from pos.core.db import BaseModel, JSONType
import logging

logger = logging.getLogger(__name__)

class Option(BaseModel):
    """Named site-wide setting"""
    __tablename__ = 'options'

    name = db.Column(db.String(191), nullable=False, unique=True, index=True)
    value = db.Column(JSONType, nullable=True)

    def __repr__(self):
        return f'<Option {self.name}>'

class Transient(BaseModel):
    """Short-lived setting with an optional expiry"""
    __tablename__ = 'transients'

    name = db.Column(db.String(172), nullable=False, unique=True, index=True)
    value = db.Column(JSONType, nullable=True)
    expires_at = db.Column(db.DateTime, nullable=True)

    def __repr__(self):
        return f'<Transient {self.name}>'

    @property
    def is_expired(self):
        """Check whether the transient has expired"""
        return self.expires_at is not None and self.expires_at <= datetime.utcnow()

class OptionStore:
    """Key-value access to the options table"""

    def get(self, key, default=None):
        """Get an option value, or default when it is not set"""
        option = Option.query.filter_by(name=key).first()
        if option is None:
            return default
        return option.value

    def set(self, key, value):
        """Create or overwrite an option"""
        option = Option.query.filter_by(name=key).first()
        if option is None:
            option = Option(name=key, value=value)
            db.session.add(option)
        else:
            option.value = value

        try:
            db.session.commit()
            logger.debug(f"Option updated: {key}")
        except Exception as e:
            db.session.rollback()
            logger.error(f"Error updating option {key}: {str(e)}")
            raise

    def delete(self, key):
        """Delete an option, returning whether it existed"""
        option = Option.query.filter_by(name=key).first()
        if option is None:
            return False

        try:
            db.session.delete(option)
            db.session.commit()
            return True
        except Exception as e:
            db.session.rollback()
            logger.error(f"Error deleting option {key}: {str(e)}")
            raise

class TransientStore:
    """Key-value access to expiring transients"""

    def get(self, key):
        """Get a transient value; expired transients read as absent"""
        transient = Transient.query.filter_by(name=key).first()
        if transient is None:
            return None
        if transient.is_expired:
            logger.debug(f"Transient expired: {key}")
            self.delete(key)
            return None
        return transient.value

    def set(self, key, value, expiration=0):
        """Set a transient; expiration is in seconds, 0 means never"""
        expires_at = None
        if expiration:
            expires_at = datetime.utcnow() + timedelta(seconds=expiration)

        transient = Transient.query.filter_by(name=key).first()
        if transient is None:
            transient = Transient(name=key, value=value, expires_at=expires_at)
            db.session.add(transient)
        else:
            transient.value = value
            transient.expires_at = expires_at

        try:
            db.session.commit()
            logger.debug(f"Transient set: {key}")
        except Exception as e:
            db.session.rollback()
            logger.error(f"Error setting transient {key}: {str(e)}")
            raise

    def delete(self, key):
        """Delete a transient, returning whether it existed"""
        transient = Transient.query.filter_by(name=key).first()
        if transient is None:
            return False

        try:
            db.session.delete(transient)
            db.session.commit()
            return True
        except Exception as e:
            db.session.rollback()
            logger.error(f"Error deleting transient {key}: {str(e)}")
            raise
