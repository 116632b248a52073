from typing import Any, Dict, List, Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from crm_bridge.integrations.salesforce.service import SalesforceService

router = APIRouter()


# Will be set by main.py after import
service: SalesforceService = None


class QueryRequest(BaseModel):
    soql: str = Field(..., min_length=1, description="SOQL statement to run")
    all_pages: bool = Field(default=False, description="Follow nextRecordsUrl until the last page")


class CacheTimeRequest(BaseModel):
    seconds: int = Field(..., ge=0)


def _require_token() -> SalesforceService:
    if service is None or not service.token_exists():
        raise HTTPException(status_code=503, detail="Salesforce session is not available")
    return service


def _items(items: List[Dict[str, Any]]) -> Dict[str, Any]:
    return {"count": len(items), "items": items}


@router.get("/crm/health")
def health():
    connected = service is not None and service.token_exists()
    cache_ok = bool(service is not None and service.cache.ping())
    return {"salesforce": "connected" if connected else "unavailable", "cache": cache_ok}


@router.get("/crm/sources")
def list_sources():
    return _items(_require_token().get_sources())


@router.get("/crm/users")
def list_users():
    return _items(_require_token().get_users())


@router.get("/crm/bdos")
def list_bdos():
    return _items(_require_token().get_bdos())


@router.get("/crm/campaigns")
def list_campaigns():
    return _items(_require_token().get_campaigns())


@router.get("/crm/fields/{resource}")
def list_fields(resource: str):
    fields = _require_token().get_fields(resource)
    if not fields:
        raise HTTPException(status_code=404, detail=f"No fields found for {resource}")
    return _items(fields)


@router.get("/crm/picklists/{resource}")
def list_picklists(resource: str, snakecase: Optional[bool] = True):
    picklists = _require_token().get_picklists(resource, snakecase=snakecase)
    if not picklists:
        raise HTTPException(status_code=404, detail=f"No picklists found for {resource}")
    return picklists


@router.post("/crm/query")
def run_query(body: QueryRequest):
    svc = _require_token()
    if body.all_pages:
        return {"records": svc.query_all(body.soql)}
    page = svc.run_query(body.soql)
    if not page:
        raise HTTPException(status_code=502, detail="Salesforce query returned no result")
    return page


@router.post("/crm/cache/flush")
def flush_cache():
    if service is None:
        raise HTTPException(status_code=503, detail="Salesforce session is not available")
    service.clear_cache()
    return {"success": True}


@router.post("/crm/cache/ttl")
def set_cache_ttl(body: CacheTimeRequest):
    if service is None:
        raise HTTPException(status_code=503, detail="Salesforce session is not available")
    service.set_cache_time(body.seconds)
    return {"success": True, "cache_time": body.seconds}
