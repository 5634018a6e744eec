# Run with: gunicorn -c gunicorn.conf.py wsgi:app

# Bind & workers
bind = "0.0.0.0:8000"
workers = 2  # override with env GUNICORN_WORKERS
threads = 1
timeout = 60
graceful_timeout = 10  # in-flight validations finish before the worker exits
keepalive = 5

# Logs to stdout/stderr (collected by Docker)
accesslog = "-"
errorlog = "-"
loglevel = "info"  # override with env LOG_LEVEL

# Trust proxy headers
forwarded_allow_ips = "*"
proxy_protocol = False


def worker_exit(server, worker):
    """Close the JWKS and provider HTTP sessions held by the worker's app."""
    from subtrack.auth.providers import shutdown

    app = getattr(worker, "wsgi", None)
    if app is not None and hasattr(app, "extensions"):
        shutdown(app)
