# Deploy: set environment (or .env) and run 'uvicorn server:app --host=0.0.0.0 --port=8000'
import logging
import os

from dotenv import load_dotenv

from ngo_api.api import create_app
from ngo_api.config import load_settings

load_dotenv()

logging.basicConfig(level=logging.INFO, handlers=[logging.StreamHandler()])
logger = logging.getLogger("ngo_api")

settings = load_settings(os.getenv("NGO_API_ENV"))
logger.info(
    "starting NGO API (database=%s, generator=%s, timezone=%s)",
    settings.database_path,
    settings.news_generator_url,
    settings.timezone,
)

app = create_app(settings)
