# app/main.py
import logging
import os
from typing import Any, Dict

from fastapi import Depends, FastAPI, Request, Response
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from starlette.concurrency import run_in_threadpool

from .errors import VerificationError
from .verify import HazardVerifier, VerifyConfig  # <- wire-in

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
}

app = FastAPI(title="Urban Hazard Photo Verifier", version="0.2.0")


# ---------- Schemas (OpenAPI documentation only) ----------
class VerifyHazardIn(BaseModel):
    imageBase64: str = Field(description="data:image/<type>;base64,<payload>")
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)


class VerificationOut(BaseModel):
    isValid: bool
    category: str = Field(description='"pothole" | "waste" | "water" | "other" | "invalid"')
    title: str
    confidence: float = Field(description="0-100")
    isSpam: bool
    reason: str


class ErrorOut(BaseModel):
    error: str
    details: str = Field(default="", description="present for some upstream failures")


ERROR_RESPONSES: Dict[int, Dict[str, Any]] = {
    code: {"model": ErrorOut} for code in (400, 402, 429, 500)
}


# ---------- Dependencies ----------
def get_verifier() -> HazardVerifier:
    # config is re-read per request so a missing key is always reported
    return HazardVerifier(VerifyConfig.from_env())


@app.middleware("http")
async def add_cors_headers(request: Request, call_next):
    try:
        response = await call_next(request)
    except Exception:
        # failures outside the route, e.g. while building the verifier
        logger.exception("unhandled error on %s", request.url.path)
        response = JSONResponse({"error": "An unexpected error occurred"}, status_code=500)
    for name, value in CORS_HEADERS.items():
        response.headers[name] = value
    return response


# ---------- Routes ----------
@app.get("/health")
def health() -> Dict[str, Any]:
    return {"ok": True, "service": "hazard-verifier", "version": "0.2.0"}


@app.options("/verify-hazard")
@app.options("/functions/v1/verify-hazard")
def verify_hazard_preflight() -> Response:
    return Response(headers=CORS_HEADERS)


@app.post(
    "/verify-hazard",
    response_model=None,
    responses={200: {"model": VerificationOut}, **ERROR_RESPONSES},
    openapi_extra={
        "requestBody": {
            "required": True,
            "content": {"application/json": {"schema": VerifyHazardIn.model_json_schema()}},
        }
    },
)
@app.post("/functions/v1/verify-hazard", response_model=None, include_in_schema=False)
async def verify_hazard(request: Request, verifier: HazardVerifier = Depends(get_verifier)) -> JSONResponse:
    """
    Classifies a hazard photo. Returns the model's verdict (or the
    manual-review fallback) with 200, or {"error": ...} with 400/402/429/500.
    """
    try:
        raw = await request.body()
        result = await run_in_threadpool(verifier.verify_json, raw)
        return JSONResponse(result)
    except VerificationError as e:
        return JSONResponse(e.to_body(), status_code=e.status_code)
    except Exception:
        logger.exception("verify-hazard error")
        return JSONResponse({"error": "An unexpected error occurred"}, status_code=500)
