from pathlib import Path

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class LoginDetails(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=Path(__file__).parent / ".env", extra="ignore"
    )

    rcm_username: str | None = Field(default=None, alias="RCM_USERNAME")
    rcm_password: str | None = Field(default=None, alias="RCM_PASSWORD")


class FetchConstants:
    """Centralized constants for login and availability fetches."""

    DEFAULT_TIMEOUT = 30
    PAGE_SIZE = 50
    BATCH_SIZE = 6
    MAX_CONCURRENT_REQUESTS = 12
    DEFAULT_CATEGORY_ID = 47
    DEFAULT_LOCATION_ID = 9
    BLOCKED_RESERVATION_TYPE = 3

    # HTTP Headers
    USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"


class BackendDetails(BaseModel):
    base_url: str = "https://bookings.rentalcarmanager.com"
    login_page_url: str = base_url + "/account/login.aspx"
    dashboard_path: str = "/dashboard/dashboard.aspx"
    availability_url: str = base_url + "/bookingsheet/loadcardata.ashx"

    # ASP.NET login form field names
    username_field: str = "ctl00$MainContent$Username"
    password_field: str = "ctl00$MainContent$Password"
    submit_field: str = "ctl00$MainContent$LoginButton"
    submit_value: str = "Sign in"
