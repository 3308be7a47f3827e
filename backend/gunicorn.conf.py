# Bind & workers
bind = "0.0.0.0:8000"
workers = 2  # override with env GUNICORN_WORKERS
# Sync workers: bcrypt hashing occupies one worker, never an event loop.
worker_class = "sync"
threads = 1
timeout = 60
graceful_timeout = 30
keepalive = 5

# Logs to stdout/stderr (collected by Docker)
accesslog = "-"
errorlog = "-"
loglevel = "info"  # override with env LOG_LEVEL

# Trust proxy headers (ProxyFix handles the app side)
forwarded_allow_ips = "*"
proxy_protocol = False

wsgi_app = "boxoffice.factory:create_app()"
