from dotenv import load_dotenv
import os

load_dotenv()
LOG_LEVEL = os.getenv("CACHE_TTL_LOG_LEVEL", "INFO").upper()
