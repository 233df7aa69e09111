import logging
from logging.config import dictConfig
from typing import Optional

from cache_ttl.settings import LOG_LEVEL


def configure_logging(level: Optional[str] = None) -> logging.Logger:
    """
    Configure root logging for applications embedding the cache
    """
    dictConfig({
        'version': 1,
        'disable_existing_loggers': False,
        'formatters': {
            'default': {
                'format': '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
            }
        },
        'handlers': {
            'default': {
                'class': 'logging.StreamHandler',
                'formatter': 'default'
            }
        },
        'root': {
            'level': (level or LOG_LEVEL).upper(),
            'handlers': ['default']
        }
    })
    return logging.getLogger("cache_ttl")
