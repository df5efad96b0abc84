from models.responses import HealthResponse, InfoResponse
from models.session import Session

__all__ = ["HealthResponse", "InfoResponse", "Session"]
