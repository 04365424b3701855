"""
Waitress WSGI entry point for production deployment.

Usage::

    python wsgi.py

Waitress is a pure-Python WSGI server, so the API runs the same way on
Linux and Windows hosts.  Put a TLS-terminating proxy in front of it.
"""

import os

from waitress import serve

from orgapi import create_app

# Production unless FLASK_ENV says otherwise.
app = create_app(os.environ.get("FLASK_ENV", "production"))

if __name__ == "__main__":
    host = os.environ.get("WAITRESS_HOST", "127.0.0.1")
    port = int(os.environ.get("WAITRESS_PORT", "8080"))
    threads = int(os.environ.get("WAITRESS_THREADS", "8"))
    app.logger.info("Starting Waitress on %s:%s", host, port)
    serve(app, host=host, port=port, threads=threads)
