from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from giftcard_ocr.config import settings

app = FastAPI(
    title="GiftCard OCR API",
    description="Turns recognized gift card text into editable form fields",
    version="0.1.0"
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.get("/")
async def root():
    return {
        "message": settings.APP_NAME,
        "version": "0.1.0",
        "status": "running"
    }

@app.get("/health")
async def health_check():
    return {"status": "healthy"}

# Import routers
from giftcard_ocr.routers import parse

# Include routers
app.include_router(parse.router)
