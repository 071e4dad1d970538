from typing import Dict, Any, Optional
import sys
import os
import copy
import logging
import logging.config

from .utils import semanticbool

'''
config logging from envs, the library itself only emits records
under the "aioetcd2" logger, applications may call config_log()
to get them printed. Once the env AIOETCD2_LOG_CONSOLE is set,
logs are put to console
'''

LOGGING: Dict[str, Any] = {
    'version': 1,
    'disable_existing_loggers': False,
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'simple',
            'stream': sys.stdout,
        },
    },
    'formatters':{
        'simple':{
            'format': '[%(asctime)s] %(process)d %(name)s [%(levelname)s] %(message)s',
        },
    },
    'loggers': {
    },
    'root': {
        'handlers': [],
        'level': 'INFO'
    },
}

def config_log(level: Optional[str]=None, console: Optional[bool]=None) -> Dict[str, Any]:
    logging_config = copy.deepcopy(LOGGING)

    handlers = []
    if console is None:
        try:
            console = semanticbool(os.getenv('AIOETCD2_LOG_CONSOLE', 'no'))
        except ValueError:
            console = False
    if console:
        handlers.append('console')

    log_level = level or os.getenv('AIOETCD2_LOG_LEVEL') or 'INFO'

    root_cfg = logging_config['root']
    assert isinstance(root_cfg, dict)

    root_cfg['level'] = log_level.upper()
    root_cfg['handlers'] = handlers

    logging.config.dictConfig(logging_config)
    return logging_config
