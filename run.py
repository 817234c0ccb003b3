import os
from app import create_app, db
from app.models import User
from app.models.user import ROLE_ADMIN


def create_initial_data(app):
    """Create the admin account if ADMIN_PASSWORD is configured"""
    with app.app_context():
        username = app.config['ADMIN_USERNAME']
        password = app.config['ADMIN_PASSWORD']
        if not password:
            print("ADMIN_PASSWORD not set; skipping admin account creation")
            return
        
        # Check if admin user already exists
        admin = User.query.filter_by(username=username).first()
        if not admin:
            admin = User(username=username, role=ROLE_ADMIN)
            admin.set_password(password)
            db.session.add(admin)
            db.session.commit()
            print(f"Created admin user: {username}")

if __name__ == '__main__':
    # Determine the environment
    env = os.getenv('FLASK_ENV', 'development')
    
    # Create the Flask app with appropriate configuration
    app = create_app(env)
    
    # Create initial data if tables are empty
    create_initial_data(app)
    
    # Print startup information
    print(f"Starting restaurant rating application in {env} mode...")
    print("Visit http://localhost:5000 to access the application")
    
    # Run the app
    if env == 'development':
        app.run(debug=True, host='0.0.0.0', port=5000)
    else:
        # In production, don't use Flask's development server
        print("Production mode - use a production WSGI server like Gunicorn")
        # For local testing of production config only:
        app.run(debug=False, host='0.0.0.0', port=5000)
