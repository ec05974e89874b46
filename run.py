"""
Entry point for Flask.

Usage (from project root):

    flask --app run.py --debug run

First start:

    flask --app run.py db upgrade        (or db.create_all() for a quick dev DB)
    flask --app run.py seed-admin admin@example.com secret "Admin"
"""

from canteen import create_app

# WSGI application object picked up by `flask run` and production servers.
app = create_app()

if __name__ == "__main__":
    # Dev only; use `flask run` or a WSGI server otherwise.
    app.run(debug=True)
