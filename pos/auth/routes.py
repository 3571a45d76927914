"""Session login API"""
from flask import Blueprint, jsonify, request
from flask_login import login_user, logout_user, current_user, login_required
from pos.auth.user import User
import logging

logger = logging.getLogger(__name__)

auth_api = Blueprint('auth_api', __name__, url_prefix='/api/auth')

@auth_api.route('/login', methods=['POST'])
def login():
    """Login API endpoint"""
    data = request.get_json(silent=True)

    # Validate input
    if not data or not data.get('username') or not data.get('password'):
        return jsonify({
            'status': 'error',
            'message': 'Username and password are required'
        }), 400

    # Find user by username or email
    username = data.get('username')
    user = User.query.filter((User.username == username) | (User.email == username)).first()

    if user is None or not user.verify_password(data.get('password')):
        logger.warning(f"Failed login for {username}")
        return jsonify({
            'status': 'error',
            'message': 'Invalid username or password'
        }), 401

    if not user.is_active:
        return jsonify({
            'status': 'error',
            'message': 'This account is inactive'
        }), 403

    login_user(user, remember=bool(data.get('remember')))
    user.update_last_login()

    return jsonify({
        'status': 'success',
        'message': 'Login successful',
        'data': {
            'user_id': user.id,
            'username': user.username,
            'email': user.email,
            'roles': [role.name for role in user.roles],
            'is_system_admin': user.is_system_admin
        }
    })

@auth_api.route('/logout', methods=['POST'])
@login_required
def logout():
    """Logout API endpoint"""
    username = current_user.username
    logout_user()
    logger.info(f"User {username} logged out")
    return jsonify({
        'status': 'success',
        'message': 'Logged out'
    })
