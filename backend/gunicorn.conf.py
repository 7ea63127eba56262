import os

# Application
wsgi_app = "socialconnect.wsgi:app"

# Bind & workers
bind = os.getenv("GUNICORN_BIND", "0.0.0.0:8000")
workers = int(os.getenv("GUNICORN_WORKERS", "2"))
threads = int(os.getenv("GUNICORN_THREADS", "1"))
timeout = 60
graceful_timeout = 30
keepalive = 5

# Access lines come from the socialconnect.access logger
accesslog = None
errorlog = "-"
loglevel = os.getenv("LOG_LEVEL", "info").lower()

# Honor proxy headers; ProxyFix in the app decides how many hops to trust
forwarded_allow_ips = "*"
proxy_protocol = False
