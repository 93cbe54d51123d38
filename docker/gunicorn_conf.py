import multiprocessing
import os

from sous_chef.config import Settings

_settings = Settings()

wsgi_app = os.getenv("APP_MODULE", "sous_chef.main:app")
bind = f"0.0.0.0:{os.getenv('PORT','8000')}"
workers = int(os.getenv("WEB_CONCURRENCY", str(multiprocessing.cpu_count()))) or 1
worker_class = "uvicorn.workers.UvicornWorker"
timeout = int(os.getenv("TIMEOUT", "60"))
keepalive = 5
graceful_timeout = 30
accesslog = "-"
errorlog = "-"
loglevel = _settings.log_level.lower()


def on_starting(server):
    # create the JSON store directory once, before workers fork
    os.makedirs(_settings.data_dir, exist_ok=True)
    server.log.info("Sous Chef data dir: %s", os.path.abspath(_settings.data_dir))
