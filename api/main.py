from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from core import db, errors, settings
from core.log import configure_logging
from resources import router as resources_router

configure_logging()


@asynccontextmanager
async def lifespan(_: FastAPI):
    # Initialize the DB pool once per process.
    await db.init_pool()
    try:
        yield
    finally:
        await db.close_pool()


app = FastAPI(lifespan=lifespan)

# Allow the local frontend dev server to call this API from the browser.
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_exception_handler(errors.ResourceError, errors.resource_error_handler)
app.add_exception_handler(StarletteHTTPException, errors.http_error_handler)

app.include_router(resources_router.router, prefix=settings.api_prefix(), tags=["resources"])


@app.get("/health")
def health() -> dict:
    return {"status": "ok"}


@app.get("/")
def root() -> dict:
    return {"message": "character attributes api"}


def serve() -> None:
    import uvicorn

    uvicorn.run(app, host=settings.host(), port=settings.port(), log_level=settings.log_level().lower())


if __name__ == "__main__":
    serve()
