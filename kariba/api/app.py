"""
FastAPI Application - REST API for Kariba clients.

Endpoints:
    POST   /api/v1/register                 Register an account
    POST   /api/v1/login                    Log in
    POST   /api/v1/matches                  Start a match against the bots
    GET    /api/v1/matches                  List active matches
    GET    /api/v1/matches/{id}             Get the match snapshot
    POST   /api/v1/matches/{id}/play        Play cards (bots reply in the same call)
    DELETE /api/v1/matches/{id}             Abandon a match
    GET    /api/v1/history/{username}       Finished-match history

Bot pacing is a presentation concern: the HTTP API resolves bot replies
immediately and returns them in `bot_actions`, clients may replay them
with a delay.

All responses are JSON with explicit Pydantic schemas.
Run with: uvicorn --factory kariba.api.app:create_app
"""

from typing import Union
import logging

from ..config import get_allowed_origins, get_data_dir, get_env
from .. import __version__

logger = logging.getLogger(__name__)


def create_app(service=None):
    """
    Create the FastAPI application.

    Args:
        service: Optional APIService instance (creates one backed by the
            JSON history store in KARIBA_DATA_DIR if not provided)

    Returns:
        FastAPI application instance
    """
    try:
        from fastapi import FastAPI, Query
        from fastapi.middleware.cors import CORSMiddleware
        from fastapi.responses import JSONResponse
    except ImportError:
        raise ImportError(
            "FastAPI not installed. Install with: pip install fastapi uvicorn"
        )

    from .service import APIService
    from .schemas import (
        # Request models
        RegisterRequest,
        LoginRequest,
        CreateMatchRequest,
        PlayCardsRequest,
        # Response models
        AuthResponse,
        MatchStateResponse,
        HistoryResponse,
        EndMatchResponse,
        MatchListResponse,
        ErrorResponse,
        HealthResponse,
        ERROR_STATUS_CODES,
    )

    # API docs are only served outside production
    show_docs = get_env() != "production"

    app = FastAPI(
        title="Kariba Engine API",
        description="""
Kariba - scare away the smaller animals at the waterhole.

## Match Flow

1. `POST /api/v1/matches` deals a match; the human moves first.
2. `POST /api/v1/matches/{id}/play` with the ids of cards of one animal.
   The bots reply in the same call; their moves are listed in `bot_actions`.
3. Repeat until `status` is `finished`.

## Error Codes

| Code | Description |
|------|-------------|
| `INVALID_MOVE` | Selection empty, mixed, not in hand, or out of turn |
| `MATCH_NOT_FOUND` | Match does not exist |
| `MATCH_FINISHED` | Match is over |
| `INVALID_CREDENTIALS` | Wrong username or password |
| `DUPLICATE_USER` | Username or email already registered |
| `STORE_UNAVAILABLE` | Account storage unreachable, retry later |
        """,
        version=__version__,
        docs_url="/api/docs" if show_docs else None,
        redoc_url="/api/redoc" if show_docs else None,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=get_allowed_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    if service is None:
        from ..history import HistoryService, JsonFileHistoryStore
        data_dir = get_data_dir()
        logger.info("Using history store in %s", data_dir)
        service = APIService(history=HistoryService(store=JsonFileHistoryStore(data_dir)))
    api_service = service

    # =========================================================================
    # Error helpers
    # =========================================================================

    def make_error_response(error: ErrorResponse) -> JSONResponse:
        """Turn a service ErrorResponse into a JSON response with its status code."""
        return JSONResponse(
            status_code=ERROR_STATUS_CODES.get(error.error_code, 400),
            content=error.model_dump(mode="json"),
        )

    # =========================================================================
    # Account Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/register",
        response_model=AuthResponse,
        responses={
            400: {"model": ErrorResponse},
            409: {"model": ErrorResponse, "description": "Username or email taken"},
            503: {"model": ErrorResponse},
        },
        tags=["Accounts"],
        summary="Register an account",
    )
    async def register(body: RegisterRequest) -> Union[AuthResponse, JSONResponse]:
        response = api_service.register(body)
        if isinstance(response, ErrorResponse):
            return make_error_response(response)
        return response

    @app.post(
        "/api/v1/login",
        response_model=AuthResponse,
        responses={
            401: {"model": ErrorResponse, "description": "Invalid credentials"},
            503: {"model": ErrorResponse},
        },
        tags=["Accounts"],
        summary="Log in",
    )
    async def login(body: LoginRequest) -> Union[AuthResponse, JSONResponse]:
        response = api_service.login(body)
        if isinstance(response, ErrorResponse):
            return make_error_response(response)
        return response

    @app.get(
        "/api/v1/history/{username}",
        response_model=HistoryResponse,
        tags=["Accounts"],
        summary="Finished matches for a user, newest first",
    )
    async def get_history(username: str) -> HistoryResponse:
        """
        Get a user's match history.

        If storage is unreachable the list is empty and `retry` is true.
        """
        return api_service.get_history(username)

    # =========================================================================
    # Match Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/matches",
        response_model=MatchStateResponse,
        tags=["Matches"],
        summary="Start a match against the bots",
    )
    async def create_match(body: CreateMatchRequest) -> MatchStateResponse:
        return api_service.create_match(body)

    @app.get(
        "/api/v1/matches",
        response_model=MatchListResponse,
        tags=["Matches"],
        summary="List active matches",
    )
    async def list_matches() -> MatchListResponse:
        matches = api_service.list_matches()
        return MatchListResponse(matches=matches, count=len(matches))

    @app.get(
        "/api/v1/matches/{match_id}",
        response_model=MatchStateResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Matches"],
        summary="Get the match snapshot",
    )
    async def get_match(match_id: str) -> Union[MatchStateResponse, JSONResponse]:
        response = api_service.get_match(match_id)
        if isinstance(response, ErrorResponse):
            return make_error_response(response)
        return response

    @app.post(
        "/api/v1/matches/{match_id}/play",
        response_model=MatchStateResponse,
        responses={
            400: {"model": ErrorResponse, "description": "Invalid move"},
            404: {"model": ErrorResponse, "description": "Match not found"},
            409: {"model": ErrorResponse, "description": "Match finished"},
        },
        tags=["Matches"],
        summary="Play cards of one animal",
    )
    async def play_cards(
        match_id: str,
        body: PlayCardsRequest,
    ) -> Union[MatchStateResponse, JSONResponse]:
        """
        Play the selected cards.

        **Request Body:**
        ```json
        {"card_ids": ["zebra_3", "zebra_5"]}
        ```
        """
        response = api_service.play_cards(match_id, body)
        if isinstance(response, ErrorResponse):
            return make_error_response(response)
        return response

    @app.delete(
        "/api/v1/matches/{match_id}",
        response_model=EndMatchResponse,
        tags=["Matches"],
        summary="Abandon a match",
    )
    async def end_match(
        match_id: str,
        reason: str = Query("user_ended", description="Reason for ending"),
    ) -> EndMatchResponse:
        success = api_service.end_match(match_id, reason)
        return EndMatchResponse(success=success, match_id=match_id)

    # =========================================================================
    # Health Check
    # =========================================================================

    @app.get(
        "/health",
        response_model=HealthResponse,
        tags=["System"],
        summary="Health check",
    )
    async def health_check() -> HealthResponse:
        return HealthResponse(
            status="healthy",
            service="kariba-engine",
            version=__version__,
            environment=get_env(),
        )

    @app.get("/", tags=["System"])
    async def root():
        """Root endpoint with API info."""
        return {
            "name": "Kariba Engine API",
            "version": __version__,
            "docs": "/api/docs" if show_docs else None,
            "health": "/health",
        }

    return app
