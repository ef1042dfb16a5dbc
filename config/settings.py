"""
Central Configuration File

ALL configuration values live here. This is the single source of truth.

Guidelines:
- Secrets (backend URLs, credentials) should be in .env, NOT here
- Import these settings in modules: from config.settings import WHIP_INGEST_URL
- Keep values generic and domain-agnostic
"""

import os
from pathlib import Path

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# =============================================================================
# CAMERA / MICROPHONE CONFIGURATION
# =============================================================================

# Requested capture constraints (ideal values, the device may negotiate down)
CAMERA_WIDTH = 1280
CAMERA_HEIGHT = 720
CAMERA_FRAME_RATE = 30
CAMERA_MAX_FRAME_RATE = 60
CAMERA_FACING_MODE = "user"
CAPTURE_AUDIO = True

# Hard limits - anything above is rejected as over-constrained
CAMERA_MAX_WIDTH = 3840
CAMERA_MAX_HEIGHT = 2160

# Device paths (Linux defaults, overridable for other hosts)
DEFAULT_CAMERA_DEVICE = os.getenv("CAMERA_DEVICE", "/dev/video0")
DEFAULT_AUDIO_DEVICE = os.getenv("AUDIO_DEVICE", "default")
AUDIO_INPUT_FORMAT = "pulse"  # PulseAudio default source

# =============================================================================
# PUBLISH (WHIP) CONFIGURATION
# =============================================================================

# Public media server host
SRS_HOST = os.getenv("SRS_HOST", "84.8.132.222")

# WHIP over HTTPS (recommended)
WHIP_INGEST_URL = os.getenv(
    "WHIP_INGEST_URL",
    f"https://{SRS_HOST}:8080/rtc/v1/whip/?app=live&stream=test",
)

# STUN servers for NAT traversal (comma separated in .env)
ICE_SERVERS = [
    url.strip()
    for url in os.getenv("ICE_SERVERS", "stun:stun.l.google.com:19302").split(",")
    if url.strip()
]

PUBLISH_HTTP_TIMEOUT = float(os.getenv("PUBLISH_HTTP_TIMEOUT", "15"))  # seconds
ICE_GATHERING_TIMEOUT = float(os.getenv("ICE_GATHERING_TIMEOUT", "10"))  # seconds

# Set to "false" for ingest servers with a self-signed certificate
PUBLISH_VERIFY_TLS = os.getenv("PUBLISH_VERIFY_TLS", "true").lower() != "false"

# =============================================================================
# RECORDING CONFIGURATION
# =============================================================================

# Chunk cadence while recording (seconds)
RECORDING_CHUNK_INTERVAL = 1.0

# Container/codec preference, probed in order at start time
RECORDING_MIME_PREFERENCES = [
    "video/webm;codecs=vp9,opus",
    "video/webm;codecs=vp8,opus",
    "video/webm",
]

# Artifact naming
RECORDING_FILENAME_PREFIX = "streammova-recording"
RECORDING_FILENAME_EXTENSION = ".webm"

# Where materialized (downloadable) artifacts are written
RECORDING_DOWNLOAD_DIR = Path(os.getenv("RECORDING_DOWNLOAD_DIR", "./recordings"))

# =============================================================================
# SCHEDULE / NOTIFICATION CONFIGURATION
# =============================================================================

# Minimum lead time for a schedule (milliseconds). Targets closer than this
# are rejected as being in the past.
SCHEDULE_MIN_LEAD_MS = int(os.getenv("SCHEDULE_MIN_LEAD_MS", "500"))

NOTIFICATION_TITLE = "StreamMova Scheduled Stream"
NOTIFICATION_DEFAULT_BODY = "It's time to start streaming!"
NOTIFICATION_TITLED_BODY = "It's time to start: {title}"

# Spoken notification settings
TTS_RATE = 150  # Words per minute
TTS_VOLUME = 0.8  # 0.0 to 1.0

# Desktop notification display time (seconds)
DESKTOP_NOTIFICATION_TIMEOUT = 10

# =============================================================================
# MONITORING CONFIGURATION
# =============================================================================

# Heartbeat Configuration
HEARTBEAT_INTERVAL = float(os.getenv("HEARTBEAT_INTERVAL", "1.0"))  # seconds
# Read by external liveness monitors (systemd timer, SSH checks)
HEARTBEAT_FILE = os.getenv(
    "HEARTBEAT_FILE",
    "/tmp/broadcast_heartbeat.json",  # noqa: S108
)

# Remote Control Configuration
# File-based control for triggering actions via SSH/scripts
CONTROL_FILE = os.getenv(
    "CONTROL_FILE",
    "/tmp/broadcast_control.cmd",  # noqa: S108
)

# Logging Configuration
LOG_DIR = "/var/log/broadcast"
LOG_SERVICE_FILE = "service.log"

# =============================================================================
# SECRETS (loaded from .env)
# =============================================================================
# IMPORTANT: These should NEVER be committed to version control!

# User/session backend (login events + profile upsert). Empty = disabled.
SESSION_BACKEND_URL = os.getenv("SESSION_BACKEND_URL", "")
SESSION_BACKEND_TIMEOUT = float(os.getenv("SESSION_BACKEND_TIMEOUT", "5"))

# Operator identity reported to the backend on service start (optional)
OPERATOR_ID = os.getenv("OPERATOR_ID", "")
OPERATOR_EMAIL = os.getenv("OPERATOR_EMAIL", "")
OPERATOR_DISPLAY_NAME = os.getenv("OPERATOR_DISPLAY_NAME", "")
