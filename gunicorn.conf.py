import multiprocessing
import os

# App
wsgi_app = "app:create_app()"

# Bind / workers / threads
bind = os.getenv("BIND", "0.0.0.0:8000")
workers = int(os.getenv("WEB_CONCURRENCY", str(max(2, multiprocessing.cpu_count() // 2))))
# completion calls block on network I/O; threads keep a worker responsive
threads = int(os.getenv("WEB_THREADS", "4"))

# Worker class & timeouts (offer generation makes up to 4 sequential model calls)
worker_class = "gthread"
timeout = int(os.getenv("WEB_TIMEOUT", "120"))
graceful_timeout = int(os.getenv("WEB_GRACEFUL_TIMEOUT", "30"))
keepalive = int(os.getenv("WEB_KEEPALIVE", "5"))

# Logging
loglevel = os.getenv("LOG_LEVEL", "info").lower()
accesslog = "-"   # stdout
errorlog = "-"    # stderr
capture_output = True

# Proxy
forwarded_allow_ips = os.getenv("FORWARDED_ALLOW_IPS", "127.0.0.1")

# Do not preload: the rate limiter and OpenAI client are per-worker state
preload_app = False


def post_fork(server, worker):
    server.log.info("Worker spawned (pid: %s)", worker.pid)


def when_ready(server):
    server.log.info("Gunicorn ready on %s", bind)
