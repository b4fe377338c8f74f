# Gunicorn configuration
# Run with: gunicorn -c deploy/gunicorn.conf.py "studypal:create_app('production')"
import multiprocessing

bind = "127.0.0.1:8000"
workers = multiprocessing.cpu_count() * 2 + 1
worker_class = "sync"
# Study flows wait on the model provider; report generation can be slow
timeout = 180
keepalive = 5
errorlog = "/var/log/studypal/gunicorn-error.log"
accesslog = "/var/log/studypal/gunicorn-access.log"
loglevel = "info"
