"""fsbench - sequential vs parallel file-read benchmark"""

from fsbench.__version__ import __version__


__all__ = ['__version__']
