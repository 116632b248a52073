"""
FastAPI application - exposes Salesforce reference data to internal tools
"""

from dotenv import load_dotenv

load_dotenv()

import logging
import os

from fastapi import FastAPI

import crm_bridge.api.crm_router as crm_router_module
from crm_bridge.api.crm_router import router as crm_router
from crm_bridge.integrations.salesforce.service import SalesforceService
from crm_bridge.utils.config_loader import config_from_env
from crm_bridge.utils.logging_setup import setup_logging


# APP_DEBUG also lowers the root level so request and response bodies are visible
sf_config = config_from_env()
setup_logging(sf_config.debug)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="CRM Bridge API",
    description="Salesforce reference data and cache administration",
    version="1.0.0",
)

# ============================================================================
# DEPENDENCY INJECTION
# ============================================================================

# Use real Redis when REDIS_URL is set, else the in-memory stub
if os.getenv("REDIS_URL"):
    from crm_bridge.database.redis_real import RedisCache

    cache = RedisCache(url=os.environ["REDIS_URL"])
else:
    from crm_bridge.database.redis import RedisCache

    cache = RedisCache()

salesforce = SalesforceService(sf_config, cache)

crm_router_module.service = salesforce
app.include_router(crm_router, prefix="/api/v1")
