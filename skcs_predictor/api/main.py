import time

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware

from skcs_predictor.api.schemas import ErrorResponse, PredictRequest, PredictResponse
from skcs_predictor.application.prediction_service import PredictionService
from skcs_predictor.config import settings
from skcs_predictor.domain.match import MatchInput
from skcs_predictor.logging_config import configure_logging, get_logger, log_error, log_request

configure_logging(
    log_level=settings.log_level,
    json_logs=settings.json_logs,
    service_name=settings.service_name,
)
logger = get_logger(__name__)

REQUIRED_FIELDS = ("homeTeam", "awayTeam", "league")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs every HTTP request with structured fields."""

    async def dispatch(self, request: Request, call_next):
        start_time = time.time()
        response = await call_next(request)
        log_request(
            logger,
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            duration_ms=(time.time() - start_time) * 1000,
        )
        return response


app = FastAPI(title="SKCS Sports Predictions API", version="1.0")

app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["GET", "POST"],
    allow_headers=["Content-Type"],
)

service = PredictionService.from_settings(settings)


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ErrorResponse(error=message).model_dump())


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    fields = []
    for err in exc.errors():
        loc = err.get("loc", ())
        name = loc[-1] if len(loc) > 1 else None
        if name in REQUIRED_FIELDS and name not in fields:
            fields.append(name)
    missing = ", ".join(fields or REQUIRED_FIELDS)
    logger.info("validation_failed", path=request.url.path, fields=fields)
    return _error(400, f"Missing required fields: {missing}")


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return _error(exc.status_code, str(exc.detail))


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    log_error(logger, exc, context={"method": request.method, "path": request.url.path})
    return _error(500, "Internal Server Error")


@app.get("/", response_class=PlainTextResponse)
async def home():
    return "SKCS Sports Predictions backend is running."


@app.post(
    "/predict",
    response_model=PredictResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def predict(request: PredictRequest):
    match = MatchInput(home_team=request.home_team, away_team=request.away_team, league=request.league)
    try:
        return await service.predict_for_match(match)
    except Exception as e:
        log_error(logger, e, context={"match": match.title, "league": match.league})
        raise HTTPException(status_code=500, detail="Prediction failed")


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("skcs_predictor.api.main:app", host=settings.host, port=settings.port)
