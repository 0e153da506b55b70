"""
Configuration module for the Shaurya interview backend.
Centralizes environment variables, logging setup, and constants.
"""
import os
import logging
from dotenv import load_dotenv

# Load .env file for local development
load_dotenv()

# ============================================================================
# Environment Configuration
# ============================================================================

# Environment identifier (production, staging, development, etc.)
ENVIRONMENT = os.environ.get("ENVIRONMENT", "production")

# Comma-separated list of origins allowed to call the API from a browser
CORS_ORIGINS = [
    origin.strip()
    for origin in os.environ.get("CORS_ORIGINS", "*").split(",")
    if origin.strip()
]

# ============================================================================
# Database Configuration
# ============================================================================

DATABASE_URL = os.environ.get("DATABASE_URL")
if not DATABASE_URL:
    raise RuntimeError("DATABASE_URL environment variable is required")

# ============================================================================
# External Service Configuration
# ============================================================================

# Supabase Storage (audio clips are uploaded here before transcription)
SUPABASE_URL = os.environ.get("SUPABASE_URL", "")
SUPABASE_SERVICE_ROLE_KEY = os.environ.get("SUPABASE_SERVICE_ROLE_KEY", "")
AUDIO_BUCKET = os.environ.get("AUDIO_BUCKET", "audio_files")

# ElevenLabs speech-to-text
ELEVENLABS_API_KEY = os.environ.get("ELEVENLABS_API_KEY", "")
ELEVENLABS_STT_URL = os.environ.get("ELEVENLABS_STT_URL", "https://api.elevenlabs.io/v1/speech-to-text")
ELEVENLABS_STT_MODEL = os.environ.get("ELEVENLABS_STT_MODEL", "scribe_v1")

# Google Cloud text-to-speech (question narration)
GOOGLE_TTS_API_KEY = os.environ.get("GOOGLE_TTS_API_KEY", "")
GOOGLE_TTS_URL = os.environ.get("GOOGLE_TTS_URL", "https://texttospeech.googleapis.com/v1/text:synthesize")
TTS_LANGUAGE_CODE = os.environ.get("TTS_LANGUAGE_CODE", "en-US")
TTS_VOICE = os.environ.get("TTS_VOICE", "en-US-Neural2-F")

# ============================================================================
# Logging Configuration
# ============================================================================

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

# ============================================================================
# Application Constants
# ============================================================================

# Number of questions generated for every interview
QUESTIONS_PER_INTERVIEW = int(os.environ.get("QUESTIONS_PER_INTERVIEW", "5"))

# Compute and store the aggregate result as soon as a session finishes
COMPUTE_RESULTS_ON_FINISH = os.environ.get("COMPUTE_RESULTS_ON_FINISH", "true").lower() == "true"

