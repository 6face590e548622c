# Bind & workers
bind = "0.0.0.0:8000"
workers = 2  # override with env GUNICORN_WORKERS
threads = 4
timeout = 60
graceful_timeout = 30
keepalive = 5

# Logs to stdout/stderr (collected by Docker)
accesslog = "-"
errorlog = "-"
loglevel = "info"  # override with env LOG_LEVEL

# Proxy headers
forwarded_allow_ips = "*"
proxy_protocol = False

wsgi_app = "sessionauth:create_app()"


def worker_exit(server, worker):
    """Close the refresh store connection pool of the exiting worker."""
    from sessionauth.core.extensions import close_refresh_store

    app = getattr(worker, "wsgi", None)
    if app is not None and hasattr(app, "extensions"):
        close_refresh_store(app)
