"""Runtime configuration and logging setup.

Environment variables (a ``.env`` file in the working directory is honoured):

- ``PORT``                 first port to try when starting the server
- ``NWP_HOST``             interface to bind
- ``NWP_DATA_DIR``         directory holding the three JSON documents
- ``NWP_ALLOWED_ORIGINS``  comma separated cross-origin allow-list
- ``NWP_PORT_ATTEMPTS``    how many consecutive ports to try before giving up
- ``NWP_MAX_UPLOAD_MB``    upper bound for GeoJSON uploads
- ``NWP_LOG_LEVEL``        DEBUG, INFO, WARNING, ERROR or CRITICAL
"""
import logging
import os
from typing import Dict, List, Mapping, Optional

from dotenv import load_dotenv

logger = logging.getLogger('nwp.config')

DEFAULT_PORT = 3000
DEFAULT_HOST = '127.0.0.1'
DEFAULT_DATA_DIR = 'data'
DEFAULT_ALLOWED_ORIGINS = ['http://127.0.0.1:5500', 'http://localhost:5500']
DEFAULT_PORT_ATTEMPTS = 10
DEFAULT_MAX_UPLOAD_MB = 16

# document id -> file name inside the data directory
DOCUMENT_FILES: Dict[str, str] = {
    'assets': 'NWP_TOURISM_DATA.geojson',
    'boundary': 'NWP_BOUNDARY.geojson',
    'feedback': 'feedback.json',
}


def setup_logging(level: str = 'INFO', log_dir: Optional[str] = 'logs') -> logging.Logger:
    """Configure the root ``nwp`` logger.

    Args:
        level: Log level string (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_dir: Directory for ``nwp_server.log``; ``None`` disables the
                 file handler.

    Returns:
        Configured logger instance.
    """
    numeric = getattr(logging, level.upper(), logging.INFO)
    root = logging.getLogger('nwp')
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter('[%(levelname)s] %(name)s: %(message)s'))
        root.addHandler(handler)
        if log_dir:
            try:
                os.makedirs(log_dir, exist_ok=True)
                fh = logging.FileHandler(os.path.join(log_dir, 'nwp_server.log'))
                fh.setFormatter(logging.Formatter(
                    '[%(asctime)s] %(levelname)s %(name)s: %(message)s'))
                root.addHandler(fh)
            except OSError:
                root.warning('Could not create log file handler in %s', log_dir)
    root.setLevel(numeric)
    return root


def _int_setting(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None or raw.strip() == '':
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning("Ignoring invalid %s=%r, using %d", name, raw, default)
        return default


class AppConfig:
    """Settings built once at startup and handed to every component.

    Nothing here is read again at request time; tests construct an
    ``AppConfig`` directly with a temporary ``data_dir``.
    """

    def __init__(self, data_dir: str = DEFAULT_DATA_DIR,
                 port: int = DEFAULT_PORT,
                 host: str = DEFAULT_HOST,
                 allowed_origins: Optional[List[str]] = None,
                 port_attempts: int = DEFAULT_PORT_ATTEMPTS,
                 max_upload_mb: int = DEFAULT_MAX_UPLOAD_MB,
                 log_level: str = 'INFO') -> None:
        self.data_dir = data_dir
        self.port = port
        self.host = host
        self.allowed_origins = (list(allowed_origins) if allowed_origins is not None
                                else list(DEFAULT_ALLOWED_ORIGINS))
        self.port_attempts = max(1, port_attempts)
        self.max_upload_mb = max_upload_mb
        self.log_level = log_level

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> 'AppConfig':
        """Build a config from *env* (defaults to ``os.environ``)."""
        if env is None:
            load_dotenv()
            env = os.environ
        origins_raw = env.get('NWP_ALLOWED_ORIGINS')
        origins = None
        if origins_raw:
            origins = [o.strip() for o in origins_raw.split(',') if o.strip()]
        return cls(
            data_dir=env.get('NWP_DATA_DIR') or DEFAULT_DATA_DIR,
            port=_int_setting(env, 'PORT', DEFAULT_PORT),
            host=env.get('NWP_HOST') or DEFAULT_HOST,
            allowed_origins=origins,
            port_attempts=_int_setting(env, 'NWP_PORT_ATTEMPTS', DEFAULT_PORT_ATTEMPTS),
            max_upload_mb=_int_setting(env, 'NWP_MAX_UPLOAD_MB', DEFAULT_MAX_UPLOAD_MB),
            log_level=env.get('NWP_LOG_LEVEL') or 'INFO',
        )

    def document_paths(self) -> Dict[str, str]:
        """Return ``{document_id: absolute path}`` for every known document."""
        base = os.path.abspath(self.data_dir)
        return {doc_id: os.path.join(base, name) for doc_id, name in DOCUMENT_FILES.items()}

    def __repr__(self) -> str:
        return (f"AppConfig(data_dir={self.data_dir!r}, host={self.host!r}, "
                f"port={self.port}, origins={self.allowed_origins!r})")
