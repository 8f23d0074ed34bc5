from .configuration import ALLOWED_STATUS_CODES, DEFAULT_STATUS_CODE, Configuration
from .url_info import UrlInfo

__all__ = ["ALLOWED_STATUS_CODES", "DEFAULT_STATUS_CODE", "Configuration", "UrlInfo"]
