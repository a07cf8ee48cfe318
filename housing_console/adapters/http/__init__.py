from .api import HousingApi
from .transport import ApiResponse, CredentialTransport, ErrorKind

__all__ = ["HousingApi", "ApiResponse", "CredentialTransport", "ErrorKind"]
