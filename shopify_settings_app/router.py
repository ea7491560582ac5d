"""FastAPI router for the settings endpoints."""

from time import perf_counter
from typing import Optional
import logging
from fastapi import APIRouter, HTTPException, Request, status
from fastapi.responses import RedirectResponse
from opentelemetry.metrics import Histogram
from pydantic import ValidationError

from .auth import AuthGate, Redirect, auth_redirect_url
from .errors import AuthenticationRequired, MalformedInput, UpstreamError
from .models.settings_models import SetSettingsRequest
from .service import SettingsService


def get_settings_router(
    service: SettingsService,
    gate: AuthGate,
    duration_histogram: Optional[Histogram] = None,
) -> APIRouter:
    """
    Create a FastAPI router for GET and POST /settings.

    Args:
        service: Settings service
        gate: Auth gate deciding between serving and redirecting to OAuth
        duration_histogram: Optional request duration metric

    Returns:
        APIRouter with async endpoints
    """
    router = APIRouter(tags=["settings"])
    logger = logging.getLogger("shopify_settings_app")

    def record(start: float, shop: str, method: str) -> None:
        duration_ms = (perf_counter() - start) * 1000
        if duration_histogram:
            duration_histogram.record(duration_ms, attributes={"shop": shop, "method": method})

    @router.get("/settings")
    async def get_settings(request: Request):
        """Return the selected product of the current shop, if any."""
        start = perf_counter()
        decision = await gate.check(request)
        if isinstance(decision, Redirect):
            return RedirectResponse(url=decision.location, status_code=302)

        session = decision.session
        try:
            result = await service.get_settings(session)
        except AuthenticationRequired as e:
            return RedirectResponse(url=auth_redirect_url(e.shop), status_code=302)
        except UpstreamError as e:
            logger.error("settings_read_failed", extra={"shop": session.shop, "error": str(e)})
            raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e)) from e
        finally:
            record(start, session.shop, "GET")
        return result.model_dump(mode="json")

    @router.post("/settings")
    async def set_settings(request: Request):
        """Select a product for the current shop and return it."""
        start = perf_counter()
        decision = await gate.check(request)
        if isinstance(decision, Redirect):
            return RedirectResponse(url=decision.location, status_code=302)

        session = decision.session
        # The embedded page posts JSON as text/plain, so the body is parsed by hand.
        body = await request.body()
        try:
            payload = SetSettingsRequest.model_validate_json(body)
            result = await service.set_settings(session, payload.product_id)
        except ValidationError as e:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Body must be JSON with a productId string") from e
        except MalformedInput as e:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
        except AuthenticationRequired as e:
            return RedirectResponse(url=auth_redirect_url(e.shop), status_code=302)
        except UpstreamError as e:
            logger.error("settings_update_failed", extra={"shop": session.shop, "error": str(e)})
            raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e)) from e
        finally:
            record(start, session.shop, "POST")
        return result.model_dump(mode="json")

    return router
