"""
Salesforce connection configuration loader.

Configuration can come from a YAML file (config/salesforce_config.yml) or from
environment variables (optionally via a .env file).
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError

logger = logging.getLogger(__name__)

TOKEN_ENDPOINT = "/services/oauth2/token"


class OrgConfig(BaseModel):
    """Identifiers that only make sense for one Salesforce org."""

    account_record_type: str = "012U00000009R0p"
    opportunity_record_type: str = "012U00000001pat"
    business_party_record_type: str = "012U0000000AD76IAG"
    individual_party_record_type: str = "012U0000000AD7BIAW"
    bdo_profile_ids: List[str] = Field(default_factory=lambda: ["00eU0000000JMMSIA4", "00eU0000000rGFhIAM"])
    default_opportunity_team: str = "UT - Direct Sales"
    broker_role: str = "Loan Broker / Referral Source"
    owner_role: str = "Small Business Owner"
    lead_converter_endpoint: str = "/services/apexrest/LeadConverter"
    opportunity_record_types: Dict[str, str] = Field(
        default_factory=lambda: {
            "sba_small": "012U00000001patIAA",
            "sba": "012U00000009OgeIAE",
            "conventional": "012U00000001qP6IAI",
            "abl": "012U0000000N2VxIAK",
        }
    )


class SalesforceConfig(BaseModel):
    """Complete adapter configuration"""

    base_url: str = ""
    sandbox_url: str = ""
    environment: str = "local"
    client_id: str = ""
    client_secret: str = ""
    username: str = ""
    password: str = ""
    api_version: str = "v50.0"
    sandbox_username_suffix: str = ".dev"
    token_ttl_minutes: int = Field(default=120, ge=1)
    cache_ttl_seconds: int = Field(default=1440, ge=0)
    ssl_verify: bool = False
    debug: bool = False
    datetime_hour: int = Field(default=7, ge=0, le=23)
    prime_rate: Optional[float] = None
    org: OrgConfig = Field(default_factory=OrgConfig)

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def resolved_base_url(self) -> str:
        """Production URL in production, sandbox URL everywhere else."""
        url = self.base_url if self.is_production else self.sandbox_url
        return url.rstrip("/")

    @property
    def resolved_username(self) -> str:
        if self.is_production:
            return self.username
        return f"{self.username}{self.sandbox_username_suffix}"

    @property
    def data_endpoint(self) -> str:
        return f"/services/data/{self.api_version}"


def _env_flag(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def config_from_env(dotenv_path: Optional[Path] = None) -> SalesforceConfig:
    """
    Build the adapter configuration from SF_* environment variables.

    Values from a .env file are loaded first but never override variables that
    are already set in the process environment.
    """
    load_dotenv(dotenv_path=dotenv_path)

    data: Dict[str, Any] = {
        "base_url": os.getenv("SF_URL", ""),
        "sandbox_url": os.getenv("SF_SANDBOX", ""),
        "environment": os.getenv("APP_ENV", "local"),
        "client_id": os.getenv("SF_CLIENT_ID", ""),
        "client_secret": os.getenv("SF_CLIENT_SECRET", ""),
        "username": os.getenv("SF_USERNAME", ""),
        "password": os.getenv("SF_PASSWORD", ""),
        "ssl_verify": _env_flag("SF_SSL_VERIFY"),
        "debug": _env_flag("APP_DEBUG"),
    }
    optional = {
        "api_version": "SF_VERSION",
        "token_ttl_minutes": "SF_TOKEN_TTL",
        "cache_ttl_seconds": "SF_CACHE_TTL",
        "datetime_hour": "SF_DATETIME_HOUR",
        "prime_rate": "PRIMERATE",
    }
    for field_name, env_name in optional.items():
        value = os.getenv(env_name)
        if value not in (None, ""):
            data[field_name] = value

    try:
        return SalesforceConfig(**data)
    except ValidationError as e:
        logger.error("Salesforce config validation failed: %s", e)
        raise


def load_salesforce_config(config_path: Optional[Path] = None) -> SalesforceConfig:
    """
    Load and validate Salesforce configuration from a YAML file

    Args:
        config_path: Path to config file. Defaults to config/salesforce_config.yml

    Returns:
        Validated SalesforceConfig object

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValidationError: If config doesn't match schema
    """
    if config_path is None:
        config_path = Path(__file__).parent.parent.parent / "config" / "salesforce_config.yml"

    if not config_path.exists():
        raise FileNotFoundError(f"Salesforce config file not found: {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    try:
        cfg = SalesforceConfig(**data)
        logger.info("Successfully loaded Salesforce config from %s", config_path)
        return cfg
    except ValidationError as e:
        logger.error("Salesforce config validation failed: %s", e)
        raise
