from pydantic import BaseModel, ConfigDict, Field


class HealthResponse(BaseModel):
    status: str
    timestamp: str          # ISO-8601, millisecond precision, UTC "Z"
    dependencies: int


class InfoResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    app: str
    version: str
    # Wire name kept from the Node original so existing probes keep working
    runtime_version: str = Field(alias="nodeVersion")
    uptime: float           # seconds since process start
