from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from mcp_tools.errors import ConfigurationError

DEFAULT_BASE_URL = "http://localhost:8080"


class AirflowConnectionConfig(BaseModel):
    """Connection settings for the Airflow REST API.

    Either ``token`` or both ``username`` and ``password`` must be set. When
    both modes are configured the bearer token wins.
    """

    model_config = ConfigDict(frozen=True)

    base_url: str = DEFAULT_BASE_URL
    token: Optional[str] = Field(default=None, repr=False)
    username: Optional[str] = None
    password: Optional[str] = Field(default=None, repr=False)
    request_timeout: float = 30.0

    @field_validator("base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/") or DEFAULT_BASE_URL

    @model_validator(mode="after")
    def _require_credentials(self) -> "AirflowConnectionConfig":
        if not self.token and not (self.username and self.password):
            raise ConfigurationError(
                "Either AIRFLOW_TOKEN or both AIRFLOW_USERNAME and "
                "AIRFLOW_PASSWORD must be provided"
            )
        return self

    @property
    def auth_mode(self) -> str:
        return "bearer" if self.token else "basic"

    @property
    def api_root(self) -> str:
        return f"{self.base_url}/api/v1"

