import logging
from pathlib import Path
from typing import Optional, Union


def setup_logging(name: str = __name__,
                  log_file: Optional[Union[str, Path]] = None,
                  level: int = logging.INFO) -> logging.Logger:
    """Set up and return a logger with the report's standard format.

    Parameters
    ----------
    name : str
        Name of the logger.
    log_file : Optional[str | Path]
        Optional file path that also receives log records.
    level : int
        Logging level, defaults to :data:`logging.INFO`.

    Returns
    -------
    logging.Logger
        Configured logger instance.
    """

    fmt = "%(asctime)s %(levelname)s %(name)s: %(message)s"
    handlers = [logging.StreamHandler()]
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(level=level, format=fmt, handlers=handlers, force=True)
    return logging.getLogger(name)
