"""
DisasterAlert - REST API

FastAPI application for submitting emergency incident reports, querying
nearby and role-scoped incidents, and managing incident status.

Run with: uvicorn disasteralert.api.main:app --reload
"""

import threading
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional

from fastapi import Depends, FastAPI, File, Form, Header, HTTPException, Query, Request, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from pydantic import BaseModel, Field

from disasteralert import __version__
from disasteralert.auth.token_store import (
    Caller,
    InMemoryTokenStore,
    TokenStore,
    parse_bearer,
    resolve_caller,
)
from disasteralert.core.config import Settings, settings
from disasteralert.core.constants import UserRole
from disasteralert.core.exceptions import (
    DisasterAlertError,
    IncidentNotFoundError,
    PreconditionError,
)
from disasteralert.core.geo_utils import is_valid_coordinate
from disasteralert.core.logging import get_logger, setup_logging
from disasteralert.crowdsource.nearby import NearbyQueryEngine
from disasteralert.crowdsource.photo_store import PhotoStore
from disasteralert.crowdsource.report_handler import IncidentHandler
from disasteralert.crowdsource.status_workflow import StatusWorkflow
from disasteralert.database.connection import DatabaseConnection, init_db
from disasteralert.database.models import Incident
from disasteralert.enrichment.geocode_chain import GeocodeProviderChain, build_geocode_chain
from disasteralert.enrichment.photo_description import (
    PhotoDescriptionProviderChain,
    build_description_chain,
)
from disasteralert.enrichment.pipeline import IncidentEnrichmentPipeline, IncidentSubmission

logger = get_logger(__name__)

# FastAPI app
app = FastAPI(
    title="DisasterAlert",
    description="Emergency incident reporting API with automatic location and photo enrichment",
    version=__version__,
    debug=settings.debug,
    docs_url="/docs",
    redoc_url="/redoc",
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Stored photos
app.mount(
    settings.upload_url_prefix,
    StaticFiles(directory=settings.upload_dir, check_dir=False),
    name="uploads",
)


# ============================================================================
# Pydantic Models
# ============================================================================

class HealthResponse(BaseModel):
    """API health check response."""
    status: str
    version: str
    timestamp: str
    database: bool
    providers: dict


class StatusUpdateRequest(BaseModel):
    """Admin status change."""
    status: Optional[str] = Field(default=None, description="Reported, Verified, In Progress or Resolved")
    department: Optional[str] = Field(default=None, description="Assigned department")


class LocationConvertRequest(BaseModel):
    """Coordinate to geocode."""
    latitude: Optional[float] = None
    longitude: Optional[float] = None


# ============================================================================
# Services
# ============================================================================

@dataclass
class Services:
    """Stateful services shared by every request."""
    db: DatabaseConnection
    handler: IncidentHandler
    pipeline: IncidentEnrichmentPipeline
    workflow: StatusWorkflow
    nearby: NearbyQueryEngine
    token_store: TokenStore

    @classmethod
    def build(
        cls,
        db: DatabaseConnection,
        token_store: Optional[TokenStore] = None,
        photo_store: Optional[PhotoStore] = None,
        geocode_chain: Optional[GeocodeProviderChain] = None,
        description_chain: Optional[PhotoDescriptionProviderChain] = None,
        config: Optional[Settings] = None,
    ) -> "Services":
        """Wire the services on top of a database connection."""
        config = config or settings
        handler = IncidentHandler(db)
        pipeline = IncidentEnrichmentPipeline(
            handler=handler,
            photo_store=photo_store or PhotoStore(config.upload_dir, config.upload_url_prefix),
            geocode_chain=geocode_chain or build_geocode_chain(config),
            description_chain=description_chain or build_description_chain(config),
        )
        return cls(
            db=db,
            handler=handler,
            pipeline=pipeline,
            workflow=StatusWorkflow(db),
            nearby=NearbyQueryEngine(db, limit=config.nearby_result_limit),
            token_store=token_store or InMemoryTokenStore(),
        )


_services: Optional[Services] = None
_services_lock = threading.Lock()


def configure_services(
    token_store: Optional[TokenStore] = None,
    database_url: Optional[str] = None,
    **components: Any,
) -> Services:
    """
    Install the shared services, typically with the deployment's token store.

    Call before serving requests; replaces any services already created.

    Args:
        token_store: Store that resolves access tokens to callers
        database_url: Overrides DATABASE_URL
        **components: Passed to Services.build (photo_store, geocode_chain, ...)
    """
    global _services
    db = init_db(database_url or settings.database_url)
    with _services_lock:
        _services = Services.build(db, token_store=token_store, **components)
    logger.info(f"Services configured with {type(_services.token_store).__name__}")
    return _services


def get_services() -> Services:
    """Lazily create the services on the configured database."""
    global _services
    if _services is None:
        with _services_lock:
            if _services is None:
                _services = Services.build(init_db(settings.database_url))
    return _services


def get_caller(
    authorization: Optional[str] = Header(None),
    token: Optional[str] = Query(None, description="Access token (alternative to the Authorization header)"),
    services: Services = Depends(get_services),
) -> Caller:
    """Resolve the bearer token to a caller."""
    raw = parse_bearer(authorization) or token
    if not raw:
        raise HTTPException(status_code=401, detail="Access token required")

    caller = resolve_caller(services.token_store, raw)
    if caller is None:
        raise HTTPException(status_code=401, detail="Invalid or expired token")
    return caller


def require_admin(caller: Caller = Depends(get_caller)) -> Caller:
    """Only admins pass."""
    if not caller.is_admin:
        raise HTTPException(status_code=403, detail="Admin access required")
    return caller


# ============================================================================
# Error Handlers
# ============================================================================

@app.exception_handler(PreconditionError)
async def precondition_error_handler(request: Request, exc: PreconditionError):
    return JSONResponse(status_code=400, content={"status": "error", "message": str(exc)})


@app.exception_handler(IncidentNotFoundError)
async def not_found_error_handler(request: Request, exc: IncidentNotFoundError):
    return JSONResponse(status_code=404, content={"status": "error", "message": str(exc)})


@app.on_event("startup")
async def on_startup():
    setup_logging()
    logger.info(f"DisasterAlert API {__version__} starting ({settings.app_env})")


# ============================================================================
# Helper Functions
# ============================================================================

def report_view(incident: Incident, include_datetime: bool = False) -> Dict[str, Any]:
    """Incident as shown in the role-based listing."""
    view = {
        "id": incident.id,
        "title": incident.title,
        "description": incident.description or "",
        "category": incident.category,
        "status": incident.status,
        "department": incident.department,
        "location_details": incident.location_details(),
        "issue_details": {
            "user_id": incident.user_id,
            "description": incident.description or "",
            "photo_analysis": incident.photo_description or "",
        },
        "image_url": incident.image_url,
        "created_at": incident.created_at.isoformat() if incident.created_at else None,
    }
    if include_datetime:
        view["reported_datetime"] = incident.reported_datetime
    return view


def incident_list(incidents: List[Incident]) -> Dict[str, Any]:
    return {"count": len(incidents), "incidents": [i.to_dict() for i in incidents]}


# ============================================================================
# System Routes
# ============================================================================

@app.get("/health", response_model=HealthResponse, tags=["System"])
async def health_check(services: Services = Depends(get_services)):
    """Check API health and the configured provider chains."""
    return HealthResponse(
        status="healthy",
        version=__version__,
        timestamp=datetime.utcnow().isoformat(),
        database=services.db.check_connection(),
        providers={
            "geocoding": services.pipeline.geocode_chain.provider_names,
            "photo_description": services.pipeline.description_chain.provider_names,
        },
    )


# ============================================================================
# Incident Routes
# ============================================================================

@app.post("/api/incidents", status_code=201, tags=["Incidents"])
async def create_incident(
    title: Optional[str] = Form(None),
    category: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    location: Optional[str] = Form(None),
    latitude: Optional[str] = Form(None),
    longitude: Optional[str] = Form(None),
    user_id: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    services: Services = Depends(get_services),
):
    """
    Submit an incident report with a camera photo.

    Coordinates come from the photo's EXIF GPS data, the submitted
    latitude/longitude, or a coordinate pair typed into the location field.
    The address and photo description are resolved before the incident is
    stored.
    """
    photo_data = await image.read() if image is not None else None
    if photo_data and len(photo_data) > settings.max_upload_bytes:
        raise HTTPException(status_code=413, detail="Image exceeds the upload size limit")

    submission = IncidentSubmission(
        title=title,
        category=category,
        photo_data=photo_data,
        photo_filename=image.filename if image is not None else None,
        description=description,
        location=location,
        latitude=latitude,
        longitude=longitude,
        user_id=user_id,
    )

    try:
        enriched = await services.pipeline.submit(submission)
    except DisasterAlertError:
        raise
    except Exception as e:
        logger.error(f"Failed to store incident: {e}")
        raise HTTPException(status_code=500, detail=str(e))

    return enriched.to_response()


@app.get("/api/incidents", tags=["Incidents"])
async def list_incidents(
    category: Optional[str] = Query(None, description="Category filter; 'All' for every category"),
    status: Optional[str] = Query(None, description="Status filter"),
    department: Optional[str] = Query(None, description="Department filter"),
    user_id: Optional[str] = Query(None, alias="userId", description="Reporter filter"),
    services: Services = Depends(get_services),
):
    """List incidents, newest first."""
    try:
        incidents = services.handler.list_incidents(
            category=category,
            status=status,
            department=department,
            user_id=user_id,
        )
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))

    return incident_list(incidents)


@app.get("/api/incidents/nearby", tags=["Incidents"])
async def nearby_incidents(
    latitude: Optional[float] = Query(None),
    longitude: Optional[float] = Query(None),
    radius: Optional[float] = Query(None, description="Radius in meters (default 5000)"),
    services: Services = Depends(get_services),
):
    """Open incidents strictly within `radius` meters, nearest first (at most 10)."""
    if latitude is None or longitude is None:
        raise HTTPException(status_code=400, detail="Latitude and longitude required")

    try:
        hits = services.nearby.find_nearby(latitude, longitude, radius)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))

    return {
        "count": len(hits),
        "radius": radius if radius is not None else settings.nearby_default_radius_m,
        "incidents": [h.to_dict() for h in hits],
    }


@app.get("/api/incidents/role-based", tags=["Incidents"])
async def role_based_incidents(
    selected_state: Optional[str] = Query(None),
    selected_taluk: Optional[str] = Query(None),
    caller: Caller = Depends(get_caller),
    services: Services = Depends(get_services),
):
    """
    Incidents visible to the caller.

    Users see their own reports. Admins see every report, optionally
    narrowed by state and taluk, plus heatmap points.
    """
    if caller.role == UserRole.USER.value:
        incidents = services.handler.list_for_user(caller.user_id)
        if not incidents:
            return {
                "status": "empty",
                "message": "No issues reported yet.",
                "role": caller.role,
                "user_visible_reports": [],
            }
        return {
            "status": "success",
            "role": caller.role,
            "user_visible_reports": [report_view(i) for i in incidents],
        }

    if caller.role != UserRole.ADMIN.value:
        raise HTTPException(status_code=403, detail="Invalid role")

    incidents = services.handler.list_for_admin(selected_state, selected_taluk)
    passes_filter = bool(incidents) if (selected_state or selected_taluk) else True

    return {
        "status": "success",
        "role": caller.role,
        "admin_filters": {
            "selected_state": selected_state or "",
            "selected_taluk": selected_taluk or "",
            "passes_filter": passes_filter,
        },
        "admin_heatmap_data": IncidentHandler.heatmap_points(incidents),
        "reports": [report_view(i, include_datetime=True) for i in incidents],
        "total_count": len(incidents),
    }


@app.get("/api/incidents/{incident_id}", tags=["Incidents"])
async def get_incident(incident_id: int, services: Services = Depends(get_services)):
    """Get a specific incident by ID."""
    incident = services.handler.get_incident(incident_id)

    if not incident:
        raise HTTPException(status_code=404, detail="Incident not found")

    return incident.to_dict()


@app.get("/api/incidents/{incident_id}/location", tags=["Incidents"])
async def get_incident_location(incident_id: int, services: Services = Depends(get_services)):
    """Resolved address bundle of an incident."""
    details = services.handler.get_location(incident_id)

    if details is None:
        raise HTTPException(status_code=404, detail="Incident not found")

    return {"status": "success", **details}


@app.patch("/api/incidents/{incident_id}/status", tags=["Incidents"])
async def update_incident_status(
    incident_id: int,
    request: StatusUpdateRequest,
    caller: Caller = Depends(require_admin),
    services: Services = Depends(get_services),
):
    """Update the status and department of an incident (admin only)."""
    incident = services.workflow.update_status(incident_id, request.status, request.department)
    logger.info(f"Admin {caller.username} set incident {incident_id} to {request.status}")

    return {
        "status": "success",
        "message": "Status updated",
        "incident": incident.to_dict(),
    }


@app.get("/api/users/{user_id}/incidents", tags=["Incidents"])
async def user_incidents(user_id: str, services: Services = Depends(get_services)):
    """Reports submitted by one user."""
    return incident_list(services.handler.list_for_user(user_id))


# ============================================================================
# Location Routes
# ============================================================================

@app.post("/api/location/convert", tags=["Location"])
async def convert_location(
    request: LocationConvertRequest,
    services: Services = Depends(get_services),
):
    """Reverse-geocode a coordinate without creating an incident."""
    if request.latitude is None or request.longitude is None:
        raise HTTPException(status_code=400, detail="Latitude and longitude are required")
    if not is_valid_coordinate(request.latitude, request.longitude):
        raise HTTPException(status_code=400, detail="Latitude or longitude out of range")

    result = await services.pipeline.enrich_location(request.latitude, request.longitude)

    return {
        "status": "success",
        "latitude": request.latitude,
        "longitude": request.longitude,
        "provider": result.provider,
        **result.address.to_dict(),
    }


# ============================================================================
# Admin Routes
# ============================================================================

@app.get("/api/departments", tags=["Admin"])
async def list_departments(services: Services = Depends(get_services)):
    """Department registry."""
    return [d.to_dict() for d in services.handler.list_departments()]


@app.get("/api/analytics", tags=["Admin"])
async def analytics(
    month: Optional[int] = Query(None, ge=1, le=12),
    year: Optional[int] = Query(None, ge=1970),
    caller: Caller = Depends(require_admin),
    services: Services = Depends(get_services),
):
    """Incident counts for the admin dashboard."""
    try:
        return services.handler.get_statistics(month=month, year=year)
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))


# ============================================================================
# Main
# ============================================================================

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=settings.api_host, port=settings.api_port)
