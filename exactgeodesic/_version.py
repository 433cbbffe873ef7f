"""Version of exactgeodesic, from installed metadata or the source tree's VERSION file"""

__all__ = ['__version__']

from importlib.metadata import PackageNotFoundError, version
from pathlib import Path

_VERSION_FILE = Path(__file__).resolve().parents[1] / 'VERSION'

try:
    __version__ = version('exactgeodesic')
except PackageNotFoundError:
    # Running from a checkout that was never installed
    __version__ = (
        _VERSION_FILE.read_text(encoding='utf-8').strip() if _VERSION_FILE.is_file() else None
    )
