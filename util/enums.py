# util/enums.py
from enum import Enum
from typing import NamedTuple
from fastapi import status


class Color(str, Enum):
    RESET = "\033[0m"
    RED = "\033[31m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    BLUE = "\033[34m"
    MAGENTA = "\033[35m"
    CYAN = "\033[36m"
    BOLD = "\033[1m"

    def __str__(self):
        return self.value


class Environment(str, Enum):
    DEV = "dev"
    PROD = "prod"


class Platform(str, Enum):
    ANDROID = "android"
    IOS = "ios"


class ErrorInfo(NamedTuple):
    message: str
    http_status: int


class ErrorMessage(Enum):
    STORE_NOT_FOUND = ErrorInfo("Store {} does not exist", status.HTTP_404_NOT_FOUND)
    STORE_EXISTS = ErrorInfo("Store {} already exists", status.HTTP_400_BAD_REQUEST)
    STORE_NOT_FOUND_FOR_KEY = ErrorInfo(
        "No store found with access key {}", status.HTTP_404_NOT_FOUND
    )
    BUNDLE_NOT_FOUND = ErrorInfo(
        "Bundle {} not found in store {}", status.HTTP_404_NOT_FOUND
    )
    NO_BUNDLE_FOR_PLATFORM = ErrorInfo(
        "No bundle in store {} for {} platform", status.HTTP_404_NOT_FOUND
    )
    BLOB_NOT_FOUND = ErrorInfo("File {} not found", status.HTTP_404_NOT_FOUND)
    MISSING_ACCESS_KEY = ErrorInfo(
        "Missing {} in request headers", status.HTTP_400_BAD_REQUEST
    )
    INVALID_ACCESS_KEY = ErrorInfo("Invalid store access key", status.HTTP_403_FORBIDDEN)
    MALFORMED_REFERENCE = ErrorInfo(
        "Bundle url {} does not reference a bundle", status.HTTP_400_BAD_REQUEST
    )
    MALFORMED_STACK = ErrorInfo("Malformed stack: {}", status.HTTP_400_BAD_REQUEST)
    MISSING_BUNDLE_REFERENCE = ErrorInfo(
        "No stack frame references a bundle url", status.HTTP_400_BAD_REQUEST
    )
    INVALID_SYMBOL_MAP = ErrorInfo("Invalid source map: {}", status.HTTP_400_BAD_REQUEST)
    INVALID_ARCHIVE = ErrorInfo("Invalid assets archive: {}", status.HTTP_400_BAD_REQUEST)
    STORAGE_ERROR = ErrorInfo("Storage failure", status.HTTP_500_INTERNAL_SERVER_ERROR)
