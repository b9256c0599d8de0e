"""Application configuration"""
import os

from dotenv import load_dotenv

load_dotenv()

# API settings
API_HOST = os.getenv("API_HOST", "0.0.0.0")
API_PORT = int(os.getenv("API_PORT", os.getenv("PORT", "4000")))

# CORS settings
CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*").split(",")

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Platforms accepted by the host validator (youtube, reddit, twitter)
ENABLED_PLATFORMS = [
    name.strip().lower()
    for name in os.getenv("ENABLED_PLATFORMS", "youtube,reddit,twitter").split(",")
    if name.strip()
]

# Upper bound for a single upstream metadata lookup
RESOLVE_TIMEOUT_SECONDS = float(os.getenv("RESOLVE_TIMEOUT_SECONDS", "30"))

# Streaming
STREAM_CHUNK_SIZE = int(os.getenv("STREAM_CHUNK_SIZE", str(64 * 1024)))

# FFmpeg binary used for MP3 conversion
FFMPEG_LOCATION = os.getenv("FFMPEG_LOCATION", "ffmpeg")

# Reddit scraping
REDDIT_USER_AGENT = os.getenv(
    "REDDIT_USER_AGENT",
    "Mozilla/5.0 (compatible; vidrelay/1.0; +https://github.com/vidrelay)"
)
# Proxy Reddit media through the server instead of redirecting to v.redd.it
REDDIT_PROXY_MEDIA = os.getenv("REDDIT_PROXY_MEDIA", "false").lower() == "true"

# Headers sent to YouTube when extracting manifests
YOUTUBE_HTTP_HEADERS = {
    'User-Agent': 'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36',
    'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8',
    'Accept-Language': 'en-us,en;q=0.5',
}
