"""Chennai gold price tracker backend.

Keep this module side-effect free so importing `gold_tracker.*` (e.g. via
Gunicorn) does not eagerly build the Flask app. Use
`gold_tracker.app:create_app()` as the WSGI factory.
"""

__version__ = '1.0.0'
