from decimal import Decimal
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    database_url: str = Field(..., alias="DATABASE_URL")

    log_level: str = Field("INFO", alias="LOG_LEVEL")

    # Fee split policy for the bus finance summary; amounts default to the policy's own constants
    fee_split_policy: str = Field("schoolFirst_v2", alias="FEE_SPLIT_POLICY")
    school_first_amount: Optional[Decimal] = Field(None, alias="SCHOOL_FIRST_AMOUNT", ge=0)
    bus_fee_cap: Optional[Decimal] = Field(None, alias="BUS_FEE_CAP", ge=0)

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


settings = Settings()
