from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore", populate_by_name=True)

    transport_backend: str = Field("pycurl", validation_alias="HTTP_SESSION_TRANSPORT_BACKEND")

    # 0 leaves the resource (whole transfer) timeout unbounded.
    connect_timeout_seconds: int = Field(300, ge=0, validation_alias="HTTP_SESSION_CONNECT_TIMEOUT_SECONDS")
    resource_timeout_seconds: int = Field(0, ge=0, validation_alias="HTTP_SESSION_RESOURCE_TIMEOUT_SECONDS")

    verbose: bool = Field(False, validation_alias="HTTP_SESSION_VERBOSE")
    user_agent: str = Field("", validation_alias="HTTP_SESSION_USER_AGENT")

    dispatch_max_workers: int = Field(4, ge=1, validation_alias="HTTP_SESSION_DISPATCH_MAX_WORKERS")
