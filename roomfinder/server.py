"""
FastAPI server for the Roomfinder matching service.

Exposes:
  - GET /health - Health check
  - GET /preferences/catalog - Scored preference categories and their values
  - GET /users/{user_id}/matches - Ranked roommate matches for a user
  - PUT /users/{user_id}/preferences - Save preferences and complete the profile
  - POST /run-graph - Execute a graph by name (matching)
  - GET /docs - Interactive API documentation (Swagger UI)
"""

from dotenv import load_dotenv
load_dotenv()

from fastapi import Depends, FastAPI, HTTPException, Request, status, Header
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from typing import Dict, Any, Optional, Annotated
import time

# Import configuration (loads .env automatically)
from roomfinder.config import config, validate_config

# Import logging setup
from roomfinder.utils.logging_config import logger, setup_logging

from roomfinder.graphs.matching import create_matching_graph
from roomfinder.schemas import (
    MatchResponse,
    PreferencesUpdate,
    PreferencesUpdateResponse,
)
from roomfinder.tools.firestore_tools import save_preferences
from roomfinder.tools.preference_catalog import (
    canonicalize_preferences,
    describe_catalog,
)
from roomfinder.utils.errors import FirestoreUnavailableError

# Setup logging
setup_logging(debug=config.DEBUG)

# ============================================================
# VALIDATE CONFIGURATION AT STARTUP
# ============================================================
try:
    config_status = validate_config()
    logger.info("Configuration validated successfully")
    for key, value in config_status.items():
        logger.info(f"  {key}: {value}")
except ValueError as e:
    logger.error(f"Configuration error: {e}")
    raise SystemExit(1)

# ============================================================
# FASTAPI APPLICATION
# ============================================================
app = FastAPI(
    title="Roomfinder Matching Service",
    description="Preference-based roommate matching and ranking",
    version="1.0.0",
)

# ============================================================
# CORS CONFIGURATION
# ============================================================
origins = [
    "http://localhost:3000",  # React dev
    "http://localhost:5000",  # Express backend
]
if config.CORS_ORIGINS:
    origins.extend(o.strip() for o in config.CORS_ORIGINS.split(",") if o.strip())

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Graphs available through /run-graph.
GRAPHS = {
    "matching": create_matching_graph,
}

# State error codes mapped to HTTP status for the REST routes.
ERROR_STATUS = {
    "user_not_found": status.HTTP_404_NOT_FOUND,
    "preferences_incomplete": status.HTTP_400_BAD_REQUEST,
    "store_unavailable": status.HTTP_503_SERVICE_UNAVAILABLE,
    "ranking_failed": status.HTTP_500_INTERNAL_SERVER_ERROR,
}


# ============================================================
# REQUEST/RESPONSE MODELS
# ============================================================
class GraphRequest(BaseModel):
    """
    Request body for /run-graph endpoint.

    Attributes:
        graph (str): Name of graph to execute. Options: 'matching'
        input (dict): Input state for the graph, e.g. {"user_id": "..."}
    """
    graph: str
    input: Dict[str, Any]


class GraphResponse(BaseModel):
    """
    Response body for /run-graph endpoint.

    Attributes:
        success (bool): Whether graph executed successfully
        graph (str): Name of the graph that was executed
        data (dict): Output from the graph
        error (Optional[str]): Error message if something went wrong
    """
    success: bool
    graph: str
    data: Dict[str, Any] = {}
    error: Optional[str] = None


# ============================================================
# DEPENDENCIES
# ============================================================
async def verify_service_token(
    authorization: Annotated[Optional[str], Header()] = None,
) -> None:
    """Reject requests without the shared bearer token when one is configured."""
    if config.SERVICE_TOKEN:
        expected = f"Bearer {config.SERVICE_TOKEN}"
        if authorization != expected:
            logger.warning("Unauthorized request: invalid or missing token")
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Unauthorized",
            )


def _run_matching(user_id: str) -> dict:
    """Invoke the matching graph and return its final state."""
    start_time = time.time()
    result = create_matching_graph().invoke({"user_id": user_id})
    logger.info(
        "matching summary: success=%s time=%.2fs",
        not result.get("error"),
        time.time() - start_time,
    )
    return result


# ============================================================
# MIDDLEWARE
# ============================================================
@app.middleware("http")
async def add_process_time_header(request: Request, call_next):
    """
    Middleware to track request processing time.

    Adds X-Process-Time header to all responses showing how long request took.
    """
    start_time = time.time()
    response = await call_next(request)
    process_time = time.time() - start_time
    response.headers["X-Process-Time"] = str(process_time)
    return response


# ============================================================
# ROUTES
# ============================================================

@app.get("/health", tags=["System"])
async def health_check() -> Dict[str, str]:
    """
    Health check endpoint.

    Returns:
        dict: {"status": "healthy"}
    """
    return {"status": "healthy"}


@app.get("/", tags=["System"])
async def root() -> Dict[str, str]:
    """
    Root endpoint.

    Returns information about the API and how to access documentation.
    """
    return {
        "service": "Roomfinder Matching Service",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/health",
    }


@app.get("/preferences/catalog", tags=["Preferences"])
async def preference_catalog() -> Dict[str, Any]:
    """Scored preference categories with their allowed values, lowest ordinal first."""
    return {"categories": describe_catalog()}


@app.get(
    "/users/{user_id}/matches",
    response_model=MatchResponse,
    tags=["Matching"],
    dependencies=[Depends(verify_service_token)],
)
def get_matches(user_id: str) -> MatchResponse:
    """
    Ranked roommate matches for a user.

    Location matches come first, then everyone else; each group is sorted by
    descending match percentage.

    Raises:
        HTTPException: 404 unknown user, 400 incomplete preferences,
            503 user store unavailable
    """
    result = _run_matching(user_id)

    if result.get("error"):
        raise HTTPException(
            status_code=ERROR_STATUS.get(
                result.get("error_code", ""),
                status.HTTP_500_INTERNAL_SERVER_ERROR,
            ),
            detail=result["error"],
        )

    return MatchResponse.model_validate(
        {
            "matches": result.get("matches", []),
            "locationMatchCount": result.get("location_match_count", 0),
            "otherMatchCount": result.get("other_match_count", 0),
        }
    )


@app.put(
    "/users/{user_id}/preferences",
    response_model=PreferencesUpdateResponse,
    tags=["Preferences"],
    dependencies=[Depends(verify_service_token)],
)
def update_preferences(user_id: str, request: PreferencesUpdate) -> PreferencesUpdateResponse:
    """
    Save a user's preferences and mark their profile completed.

    Retired option labels are rewritten to current catalog values before
    saving. Unknown preference keys are rejected with 422 by validation.
    """
    preferences = canonicalize_preferences(
        request.preferences.model_dump(by_alias=True)
    )

    try:
        saved = save_preferences(user_id, preferences)
    except FirestoreUnavailableError:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="User store unavailable",
        )

    if saved is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"User not found: {user_id}",
        )

    return PreferencesUpdateResponse(
        message="Preferences updated successfully",
        preferences=saved,
    )


@app.post(
    "/run-graph",
    response_model=GraphResponse,
    tags=["Graphs"],
    dependencies=[Depends(verify_service_token)],
)
def run_graph(request: GraphRequest) -> GraphResponse:
    """
    Execute a LangGraph graph and return its final state.

    Supported graphs:
      - matching: ranked roommate matches for input["user_id"]

    Raises:
        HTTPException: If graph doesn't exist or fails to execute
    """
    logger.info(f"Received request for graph: {request.graph}")
    logger.debug(f"Input keys: {list(request.input.keys())}")

    factory = GRAPHS.get(request.graph)
    if factory is None:
        logger.error(f"Unknown graph: {request.graph}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unknown graph: {request.graph}. "
                   f"Valid options: {', '.join(GRAPHS)}",
        )

    if request.graph == "matching" and not request.input.get("user_id"):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="matching graph requires user_id in input",
        )

    start_time = time.time()
    try:
        result = factory().invoke(request.input)
    except Exception as e:
        execution_time = time.time() - start_time
        logger.error(f"{request.graph} graph failed after {execution_time:.2f}s: {str(e)}")
        logger.exception("Full traceback:")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Graph execution failed: {str(e)}",
        )

    execution_time = time.time() - start_time
    logger.info(
        "run-graph summary: graph=%s success=%s time=%.2fs",
        request.graph,
        not result.get("error"),
        execution_time,
    )

    return GraphResponse(
        success=not result.get("error"),
        graph=request.graph,
        data=result,
        error=result.get("error"),
    )


# ============================================================
# ERROR HANDLERS
# ============================================================

@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    """
    Handle HTTP exceptions with consistent error response format.
    """
    logger.error(f"HTTP Exception: {exc.status_code} - {exc.detail}")
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "success": False,
            "error": exc.detail,
            "status_code": exc.status_code
        }
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """
    Handle unexpected exceptions.

    Never returns the exception message to the client; it is logged instead.
    """
    logger.error(f"Unhandled exception: {str(exc)}")
    logger.exception("Full traceback:")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "success": False,
            "error": "Internal server error",
            "status_code": 500
        }
    )


# ============================================================
# STARTUP EVENTS
# ============================================================

@app.on_event("startup")
async def startup_event():
    """
    Run when the application starts.

    Configuration is already validated above (in module-level code),
    we log the effective settings here for visibility.
    """
    logger.info("=" * 60)
    logger.info("Roomfinder Matching Service Starting Up")
    logger.info("=" * 60)
    logger.info(f"Firebase Project: {config.FIREBASE_PROJECT_ID}")
    logger.info(f"Default City: {config.DEFAULT_CITY}")
    logger.info(f"Max Candidates: {config.MAX_CANDIDATES}")
    logger.info(f"Debug Mode: {config.DEBUG}")


@app.on_event("shutdown")
async def shutdown_event():
    """
    Run when the application shuts down.
    """
    logger.info("Roomfinder Matching Service Shutting Down")


# ============================================================
# ENTRY POINT
# ============================================================

if __name__ == "__main__":
    """
    Run with: python -m uvicorn roomfinder.server:app --reload
    """
    import uvicorn
    uvicorn.run(
        app,
        host=config.HOST,
        port=config.PORT,
        log_level="info" if not config.DEBUG else "debug"
    )
