# backend/skillcheck/main.py
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import config, models, utils
from .database import engine
from .errors import SkillcheckError
from .routes import analytics_routes, session_routes, skill_routes, user_routes

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# ensure DB tables exist
models.Base.metadata.create_all(bind=engine)

app = FastAPI(title="Skillcheck API")

# ----------------- CORS -----------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ----------------- error envelopes -----------------
@app.exception_handler(SkillcheckError)
async def skillcheck_error_handler(request: Request, exc: SkillcheckError):
    return utils.error_response(exc.message, exc.status_code)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if not errors:
        return utils.error_response("Invalid request", 400)
    first = errors[0]
    field = ".".join(str(p) for p in first.get("loc", ()) if p not in ("body", "path", "query"))
    message = first.get("msg", "Invalid value")
    return utils.error_response(f"{field}: {message}" if field else message, 400)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return utils.error_response(str(exc.detail), exc.status_code)


# include routers
app.include_router(user_routes.router)
app.include_router(skill_routes.router)
app.include_router(session_routes.router)
app.include_router(analytics_routes.router)

@app.get("/")
def root():
    return {"message": "Skillcheck API is running. Open /docs for API."}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("skillcheck.main:app", host="0.0.0.0", port=config.PORT)
