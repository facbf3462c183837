from fastapi import FastAPI, HTTPException, Query, Depends, Body
from fastapi.responses import StreamingResponse
from fastapi.middleware.cors import CORSMiddleware
import io
import logging

from .core.config import settings
from .models_api import schemas # Pydantic models
from .services import attempt_service, barista_service, sentence_service, speech_service, stats_service
from .services.store_service import UserStore

# Configure logging
logging.basicConfig(level=settings.LOG_LEVEL, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)

app = FastAPI(title=settings.APP_NAME, version="0.1.0")

# CORS (Cross-Origin Resource Sharing)
# Allows the Streamlit frontend (on a different port) to talk to this API
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

_store = None

def get_store() -> UserStore:
    """The learner store is owned by the app and handed to endpoints that need it."""
    global _store
    if _store is None:
        _store = UserStore(settings.STORE_PATH)
    return _store


@app.on_event("startup")
async def startup_event():
    logger.info("Application starting up...")
    if not sentence_service.GENRES:
        logger.warning("Sentence bank is empty. /sentences/random/ will fail.")
    logger.info(f"Learner store: {settings.STORE_PATH}")
    logger.info("Startup complete.")


@app.get("/health")
async def health():
    return {"status": "ok", "app": settings.APP_NAME}


@app.post("/analyze/", response_model=schemas.AnalysisResult)
def analyze_endpoint(request: schemas.AnalysisRequest):
    # Pure computation over the two strings, it cannot fail on user data
    return barista_service.analyze_input(request.input, request.target, request.speed)


@app.get("/sentences/", response_model=schemas.MenuResponse)
def sentence_menu_endpoint():
    return schemas.MenuResponse(genres=sentence_service.GENRES, difficulties=sentence_service.DIFFICULTIES)


@app.get("/sentences/random/", response_model=schemas.SentenceResponse)
def random_sentence_endpoint(
    genre: str = Query(sentence_service.DEFAULT_GENRE, description="Genre id, e.g. 'daily'."),
    difficulty: str = Query(sentence_service.DEFAULT_DIFFICULTY, description="Sugar level, e.g. 'sugar-100'.")
):
    if not sentence_service.is_valid_menu(genre, difficulty):
        logger.info(f"Unknown menu '{genre}'/'{difficulty}', serving the default menu instead.")
    try:
        return sentence_service.pick_sentence(genre, difficulty)
    except RuntimeError as e:
        logger.error(f"Could not pick a sentence: {e}", exc_info=True)
        raise HTTPException(status_code=503, detail=f"Service temporarily unavailable: {str(e)}")


@app.post("/attempts/", response_model=schemas.AttemptResponse)
def submit_attempt_endpoint(attempt: schemas.AttemptRequest, store: UserStore = Depends(get_store)):
    try:
        return attempt_service.submit_attempt(store, attempt)
    except ValueError as e: # Nothing typed / no target
        logger.warning(f"Rejected attempt: {e}")
        raise HTTPException(status_code=400, detail=f"Invalid data or format: {str(e)}")
    except OSError as e:
        logger.error(f"Could not persist attempt: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Failed to save attempt: {str(e)}")


@app.get("/profile/", response_model=schemas.UserState)
def get_profile_endpoint(store: UserStore = Depends(get_store)):
    return store.state


@app.patch("/profile/", response_model=schemas.UserProfile)
def update_profile_endpoint(updates: schemas.ProfileUpdate, store: UserStore = Depends(get_store)):
    try:
        return store.update_profile(updates.model_dump(exclude_unset=True))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=f"Invalid data or format: {str(e)}")


@app.patch("/settings/", response_model=schemas.UserSettings)
def update_settings_endpoint(updates: schemas.SettingsUpdate, store: UserStore = Depends(get_store)):
    try:
        return store.update_settings(updates.model_dump(exclude_unset=True))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=f"Invalid data or format: {str(e)}")


@app.get("/stats/", response_model=schemas.ProfileStats)
def stats_endpoint(store: UserStore = Depends(get_store)):
    try:
        return stats_service.summarize(store.state)
    except Exception as e:
        logger.error(f"Unexpected error while computing profile stats: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"An unexpected error occurred: {str(e)}")


@app.get("/export/")
def export_endpoint(store: UserStore = Depends(get_store)):
    return store.export_data()


@app.post("/import/", response_model=schemas.ImportResponse)
def import_endpoint(document: dict = Body(...), store: UserStore = Depends(get_store)):
    if not store.import_data(document):
        raise HTTPException(status_code=400, detail="Invalid backup document. Import failed.")
    return schemas.ImportResponse(imported=True)


@app.delete("/history/")
def clear_history_endpoint(store: UserStore = Depends(get_store)):
    store.clear_history()
    return {"cleared": True}


@app.get("/pronounce/")
def pronounce_endpoint(
    text: str = Query(..., description="Korean text to read aloud."),
    slow: bool = Query(False, description="Read slowly.")
):
    try:
        audio_bytes = speech_service.generate_pronunciation_audio(text, slow=slow)
        # StreamingResponse is good for binary data like audio
        return StreamingResponse(io.BytesIO(audio_bytes), media_type="audio/mpeg")
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except RuntimeError as e:
        logger.error(f"Pronunciation audio unavailable for '{text}': {e}", exc_info=True)
        raise HTTPException(status_code=503, detail=f"Service temporarily unavailable: {str(e)}")
