"""
ClassPilot - Main API Server
HTTP endpoints for lesson generation, module suggestions and saved modules.
"""

import logging
from typing import List, Optional

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

import config
from core.exceptions import ProviderFailure, SinkFailure
from models.schemas import Lesson, Module, ModuleMetadata, ModuleNameRequest, TopicRequest
from services.lesson_service import LessonService
from services.module_store import InMemoryModuleStore, ModuleStore

# Initialize FastAPI app
app = FastAPI(
    title="ClassPilot API",
    description="AI-powered course authoring: lesson generation, module suggestions and module storage.",
    version="1.0.0"
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # In production, restrict this to your frontend's domain
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Configure logging
logging.basicConfig(level=config.LOG_LEVEL, format='%(asctime)s - %(levelname)s - %(message)s')

# Initialize services
lesson_service: Optional[LessonService] = None
module_store: ModuleStore = InMemoryModuleStore()

try:
    lesson_service = LessonService()
    logging.info("Lesson service initialized")
except Exception as e:
    logging.warning(f"Lesson service not available: {e}")

def configure_services(service: Optional[LessonService] = None, store: Optional[ModuleStore] = None):
    """Swap in shared services, e.g. when the socket server runs in the same process."""
    global lesson_service, module_store
    if service is not None:
        lesson_service = service
    if store is not None:
        module_store = store

def _require_lesson_service() -> LessonService:
    if lesson_service is None:
        raise HTTPException(status_code=503, detail="Lesson generation service not available")
    return lesson_service

# ===== GENERATION ENDPOINTS =====

@app.post("/api/generate", response_model=Lesson, response_model_by_alias=True, response_model_exclude_none=True)
async def generate_lesson(request: TopicRequest):
    """Generate a structured lesson for a topic."""
    service = _require_lesson_service()
    if not request.topic.strip():
        raise HTTPException(status_code=400, detail="Topic is required")

    try:
        return await service.generate_lesson(request.topic.strip())
    except ProviderFailure as e:
        logging.error(f"AI API error: {e}")
        raise HTTPException(status_code=500, detail="Failed to generate lesson")

@app.post("/api/module-suggestions", response_model=ModuleMetadata, response_model_by_alias=True)
async def suggest_module(request: TopicRequest):
    """Suggest module metadata for a lesson topic."""
    service = _require_lesson_service()
    if not request.topic.strip():
        raise HTTPException(status_code=400, detail="Topic is required")

    try:
        return await service.suggest_module(request.topic.strip())
    except ProviderFailure as e:
        logging.error(f"AI API error: {e}")
        raise HTTPException(status_code=500, detail="Failed to generate module suggestions")

@app.post("/api/module-lesson", response_model=Lesson, response_model_by_alias=True)
async def generate_module_lesson(request: ModuleNameRequest):
    """Generate a lesson that fits a module name."""
    service = _require_lesson_service()
    if not request.module_name.strip():
        raise HTTPException(status_code=400, detail="Module name is required")

    try:
        return await service.generate_module_lesson(request.module_name.strip())
    except ProviderFailure as e:
        logging.error(f"AI API error: {e}")
        raise HTTPException(status_code=500, detail="Failed to generate lesson from module name")

# ===== MODULE ENDPOINTS =====

@app.get("/api/modules", response_model=List[Module], response_model_by_alias=True)
async def list_modules():
    """All saved modules, oldest first."""
    return await module_store.list_all()

@app.post("/api/modules")
async def save_module(module: Module):
    """Append a module to the store."""
    try:
        await module_store.append(module)
    except SinkFailure as e:
        logging.error(f"Error saving module: {e}")
        raise HTTPException(status_code=500, detail="Failed to save module")
    return {"status": "ok"}

@app.get("/health")
async def health():
    return {
        "status": "ok",
        "lesson_service": lesson_service is not None,
        "model": config.LLM_MODEL_NAME,
    }

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=config.API_HOST, port=config.API_PORT)
