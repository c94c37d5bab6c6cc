"""
Service context tag attached to every log line.

Format: {service}@{deploy_env}:{instance}
"""

import os
from functools import lru_cache
import socket


@lru_cache(maxsize=1)
def get_service_context() -> str:
    service_name = os.getenv('SERVICE_NAME', 'registration-service')
    deploy_env = os.getenv('DEPLOY_ENV', 'local_dev')

    if deploy_env == 'local_dev':
        instance = str(os.getpid())
    else:
        # Container hostname is the pod / task name, trimmed for brevity
        instance = (os.getenv('HOSTNAME') or socket.gethostname())[-12:]

    return f'{service_name}@{deploy_env}:{instance}'
