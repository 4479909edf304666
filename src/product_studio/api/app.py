from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import Depends, FastAPI, File, Form, HTTPException, Request, UploadFile
from fastapi.responses import HTMLResponse, Response
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates

from product_studio.config import Settings, settings
from product_studio.errors import StyleFieldError
from product_studio.intake import decode_data_uri, read_upload
from product_studio.providers.base import StudioProvider
from product_studio.providers.gemini_provider import GeminiProvider
from product_studio.studio import SLOTS, Studio, StudioView
from product_studio.styles import STYLE_LABELS, STYLE_OPTIONS

logger = logging.getLogger(__name__)

BASE_DIR = Path(__file__).resolve().parent
templates = Jinja2Templates(directory=str(BASE_DIR / "templates"))


def _get_gemini(cfg: Settings) -> GeminiProvider:
    return GeminiProvider(
        api_key=cfg.gemini_api_key,
        text_model=cfg.gemini_text_model,
        image_model=cfg.gemini_image_model,
    )


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def get_studio(request: Request) -> Studio:
    return request.app.state.studio


def create_app(cfg: Settings | None = None, provider: StudioProvider | None = None) -> FastAPI:
    """
    Build the app around one studio session. The provider is created once
    here (or injected) and shared by both orchestrators.
    """
    cfg = cfg or settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        _configure_logging(cfg.log_level)
        backend = provider or _get_gemini(cfg)
        studio = Studio(
            backend,
            debounce_seconds=cfg.prompt_debounce_seconds,
            preview_max_edge=cfg.preview_max_edge,
        )
        app.state.studio = studio
        studio.start()
        logger.info("studio ready (provider=%s)", backend.name)
        try:
            yield
        finally:
            studio.close()

    app = FastAPI(title="product_studio", lifespan=lifespan)

    static_dir = BASE_DIR / "static"
    app.mount("/static", StaticFiles(directory=str(static_dir)), name="static")

    @app.get("/", response_class=HTMLResponse)
    def index(request: Request, studio: Studio = Depends(get_studio)):
        return templates.TemplateResponse(
            request=request,
            name="index.html",
            context={
                "view": studio.snapshot(),
                "style_options": STYLE_OPTIONS,
                "style_labels": STYLE_LABELS,
            },
        )

    @app.get("/health")
    def health():
        return {"status": "running"}

    @app.get("/api/state", response_model=StudioView)
    def get_state(studio: Studio = Depends(get_studio)):
        return studio.snapshot()

    @app.post("/api/images/{slot}", response_model=StudioView)
    async def upload_image(
        slot: str,
        file: UploadFile | None = File(None),
        studio: Studio = Depends(get_studio),
    ):
        if slot not in SLOTS:
            raise HTTPException(status_code=404, detail=f"unknown image slot '{slot}'")
        # Non-images and unreadable uploads clear the slot; nothing is reported.
        image = await read_upload(file)
        studio.set_image(slot, image)
        return studio.snapshot()

    # Studio mutations stay on the event loop that owns the debouncer.
    @app.delete("/api/images/{slot}", response_model=StudioView)
    async def clear_image(slot: str, studio: Studio = Depends(get_studio)):
        if slot not in SLOTS:
            raise HTTPException(status_code=404, detail=f"unknown image slot '{slot}'")
        studio.set_image(slot, None)
        return studio.snapshot()

    @app.post("/api/style", response_model=StudioView)
    async def update_style(
        field: str = Form(...),
        value: str = Form(...),
        studio: Studio = Depends(get_studio),
    ):
        try:
            studio.update_style(field, value)
        except StyleFieldError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        return studio.snapshot()

    @app.post("/api/generate", response_model=StudioView)
    async def generate_image(studio: Studio = Depends(get_studio)):
        # Failures land in the view's error field rather than as HTTP errors.
        await studio.generate_image()
        return studio.snapshot()

    @app.get("/api/result")
    def get_result(studio: Studio = Depends(get_studio)):
        image = decode_data_uri(studio.generated_image) if studio.generated_image else None
        if image is None:
            raise HTTPException(status_code=404, detail="no generated image yet")
        ext = image.media_type.split("/")[-1]
        headers = {"Content-Disposition": f'inline; filename="product_shot.{ext}"'}
        return Response(content=image.to_bytes(), media_type=image.media_type, headers=headers)

    return app


app = create_app()
