"""
WSGI entry point. Elastic Beanstalk serves the module-level `application`.

This is the Flask adapter from backend/app.py, so all Lambda handlers run
in one web process behind a single host.
"""
from backend.app import create_app

application = create_app()

if __name__ == "__main__":
    application.run(debug=True)
