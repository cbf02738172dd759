from fastapi import APIRouter, HTTPException, Request, status
from fastapi.responses import JSONResponse

from salon_api.core.limiter import limiter
from salon_api.core.tenancy import TenantDep
from salon_api.db import SessionDep
from salon_api.schemas.branding import SubdomainValidationRequest
from salon_api.services.branding import (
    SubdomainError,
    branding_payload,
    build_manifest,
    location_by_location_id,
    location_by_subdomain,
    validate_subdomain,
)

router = APIRouter()


@router.get("/current", summary="Branding of the tenant addressed by the request host")
def get_current_branding(session: SessionDep, tenant: TenantDep) -> dict:
    if not tenant:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No tenant for this host")

    location = location_by_subdomain(session, tenant)
    if not location:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Location not found for this subdomain")
    return {"success": True, "data": branding_payload(location)}


@router.get("/location/{location_id}", summary="Branding by location ID")
def get_branding_by_location_id(location_id: str, session: SessionDep) -> dict:
    location = location_by_location_id(session, location_id)
    if not location:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Location not found for this location ID")
    return {"success": True, "data": branding_payload(location)}


@router.get("/manifest/{subdomain}.webmanifest", summary="PWA manifest for a subdomain")
def get_manifest(subdomain: str, session: SessionDep) -> JSONResponse:
    location = location_by_subdomain(session, subdomain)
    if not location:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Location not found for this subdomain")
    return JSONResponse(content=build_manifest(location), media_type="application/manifest+json")


@router.post("/validate-subdomain", summary="Check that a subdomain can be claimed")
@limiter.limit("30/minute")
def post_validate_subdomain(request: Request, payload: SubdomainValidationRequest, session: SessionDep) -> dict:
    try:
        data = validate_subdomain(session, payload.subdomain, payload.location_id)
    except SubdomainError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from None
    return {"success": True, "message": "Subdomain is available", "data": data}


@router.get("/{subdomain}", summary="Branding by subdomain")
def get_branding_by_subdomain(subdomain: str, session: SessionDep) -> dict:
    location = location_by_subdomain(session, subdomain)
    if not location:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Location not found for this subdomain")
    return {"success": True, "data": branding_payload(location)}
