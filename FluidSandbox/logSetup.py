# -- Logging Setup -- #

'''
Console logging configuration for the sandbox entry points.

Library modules only create module loggers; handlers are attached
here, once, by whichever entry point runs the simulation.
'''

from __future__ import annotations

import logging

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

_consoleHandler: logging.Handler | None = None


def setupLogging(level: str = 'WARNING', name: str = 'FluidSandbox') -> logging.Logger:
    '''
    Attach a console handler to the package logger.

    Calling it again only updates the level.

    Parameters:
    -----------
    level : str
        Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    name : str
        Logger to configure

    Returns:
    --------
    logging.Logger : Configured logger
    '''
    global _consoleHandler

    numericLevel = getattr(logging, level.upper(), logging.WARNING)

    logger = logging.getLogger(name)
    logger.setLevel(numericLevel)

    if _consoleHandler is None:
        _consoleHandler = logging.StreamHandler()
        _consoleHandler.setFormatter(logging.Formatter(LOG_FORMAT))
    if _consoleHandler not in logger.handlers:
        logger.addHandler(_consoleHandler)
    _consoleHandler.setLevel(numericLevel)

    return logger
