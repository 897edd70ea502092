"""
Purpose:
- Expose admin endpoints to inspect and invalidate reference data caches:
    • GET  /reference-data                 → registered types and their cache state
    • GET  /reference-data/{type_name}     → codes and synonyms of one type (loads it)
    • POST /reference-data/{type_name}/reload → refresh in place on next lookup
    • POST /reference-data/reset           → drop every cache

Role in System:
- The API layer holds no caching logic; it calls the registry and ReferenceCache.
"""

from typing import Dict, List

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from refdata.core.exceptions import LoadFailure
from refdata.reference.cache import CacheState, ReferenceCache
from refdata.reference.registry import registry

router = APIRouter(
    prefix="/reference-data",
    tags=["reference-data"]
)

# -----------------------------------------------------------------------------
# Schemas
# -----------------------------------------------------------------------------

class ReferenceTypeOut(BaseModel):
    name: str
    state: str
    codes: int
    mirror_in_tests: bool


class ReferenceTypeDetailOut(ReferenceTypeOut):
    code_list: List[str]
    synonyms: Dict[str, str]


# -----------------------------------------------------------------------------
# Helpers
# -----------------------------------------------------------------------------

def _find_type(type_name: str) -> ReferenceCache:
    for cache in registry.enumerate():
        if cache.name == type_name:
            return cache
    raise HTTPException(status_code=404, detail=f"Unknown reference data type {type_name}")


def _summary(cache: ReferenceCache) -> ReferenceTypeOut:
    # Only a LOADED cache can be counted without going to storage
    loaded = cache.state is CacheState.LOADED
    return ReferenceTypeOut(
        name=cache.name,
        state=cache.state.value,
        codes=len(cache.all_by_code()) if loaded else 0,
        mirror_in_tests=cache.mirror_in_tests,
    )


# -----------------------------------------------------------------------------
# Routes
# -----------------------------------------------------------------------------

@router.get("/", response_model=List[ReferenceTypeOut])
def list_reference_types():
    """
    GET /reference-data

    Lists registered types without triggering any load.
    """
    return [_summary(cache) for cache in registry.enumerate()]


@router.post("/reset")
def reset_reference_types():
    """
    POST /reference-data/reset
    """
    registry.reset_all()
    return {"status": "ok"}


@router.get("/{type_name}", response_model=ReferenceTypeDetailOut)
def get_reference_type(type_name: str):
    """
    GET /reference-data/{type_name}

    Loads the type if needed. 503 when storage cannot be read.
    """
    cache = _find_type(type_name)
    try:
        by_code = cache.all_by_code()
    except LoadFailure as e:
        raise HTTPException(status_code=503, detail=str(e))
    return ReferenceTypeDetailOut(
        name=cache.name,
        state=cache.state.value,
        codes=len(by_code),
        mirror_in_tests=cache.mirror_in_tests,
        code_list=sorted(by_code),
        synonyms=dict(cache.synonyms.items()),
    )


@router.post("/{type_name}/reload")
def reload_reference_type(type_name: str):
    """
    POST /reference-data/{type_name}/reload

    Marks the type stale; rows are refreshed in place on the next lookup.
    """
    cache = _find_type(type_name)
    cache.needs_reload()
    return {"status": "ok", "state": cache.state.value}
