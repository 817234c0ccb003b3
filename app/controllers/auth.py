from flask import Blueprint, render_template, request, redirect, url_for, flash, session, current_app
from flask_login import login_user, logout_user, current_user
from sqlalchemy.exc import IntegrityError
from app import db, limiter
from app.models import User
from app.models.user import ROLE_NORMAL
from app.utils.logging_config import get_logger, log_security_event

auth_bp = Blueprint('auth', __name__)
logger = get_logger(__name__)

MIN_PASSWORD_LENGTH = 6

def _login_rate_limit():
    return current_app.config['LOGIN_RATE_LIMIT']

@auth_bp.route('/register', methods=['GET', 'POST'])
def register():
    if current_user.is_authenticated:
        return redirect(url_for('main.index'))
    
    if request.method == 'POST':
        # Get form data
        username = request.form.get('username', '').strip()
        password = request.form.get('password', '')
        
        # Validation
        if not all([username, password]):
            flash('Username and password are required!', 'error')
            return render_template('auth/register.html')
        
        if len(password) < MIN_PASSWORD_LENGTH:
            flash(f'Password must be at least {MIN_PASSWORD_LENGTH} characters long!', 'error')
            return render_template('auth/register.html')
        
        # Check if user already exists
        if User.query.filter_by(username=username).first():
            flash('Username is already taken', 'error')
            return render_template('auth/register.html')
        
        # Create new user
        try:
            user = User(username=username, role=ROLE_NORMAL)
            user.set_password(password)
            
            db.session.add(user)
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            flash('Username is already taken', 'error')
            return render_template('auth/register.html')
        
        logger.info(f"Registered user {username}")
        flash('User registered successfully. Please login.', 'success')
        return redirect(url_for('auth.login'))
    
    return render_template('auth/register.html')

@auth_bp.route('/login', methods=['GET', 'POST'])
@limiter.limit(_login_rate_limit, methods=['POST'])
def login():
    if current_user.is_authenticated:
        return redirect(url_for('main.index'))
    
    if request.method == 'POST':
        username = request.form.get('username', '').strip()
        password = request.form.get('password', '')
        
        if not all([username, password]):
            flash('Username and password are required!', 'error')
            return render_template('auth/login.html')
        
        user = User.query.filter_by(username=username).first()
        
        if user and user.check_password(password):
            login_user(user)
            
            # Redirect based on user role
            if user.is_admin:
                return redirect(url_for('admin.restaurants'))
            return redirect(url_for('main.index'))
        
        log_security_event('LOGIN_FAILED', ip_address=request.remote_addr, details=username)
        flash('Invalid username or password!', 'error')
    
    return render_template('auth/login.html')

@auth_bp.route('/logout')
def logout():
    logout_user()
    session.clear()
    flash('You have been logged out successfully.', 'info')
    return redirect(url_for('auth.login'))
