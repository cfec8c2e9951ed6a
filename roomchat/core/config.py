# roomchat/core/config.py
import os
from typing import List
from dotenv import load_dotenv

class Settings:
    """
    Setup environment variables.
        - CLIENT_URL the allowed CORS origin(s), comma separated
        - DEFAULT_ROOM the room used when an event does not name one
        - MESSAGE_HISTORY_LIMIT how many messages each room keeps in memory
        - PAGE_SIZE how many messages a "load_more" request returns
        - PREVIEW_LENGTH how many characters of a message go into a notification
        - MAX_MESSAGE_BYTES the largest inbound WebSocket frame accepted
    """

    # Load environment variables from the .env file
    load_dotenv()

    CLIENT_URL: str = os.getenv("CLIENT_URL", "http://localhost:5173")

    HOST: str = os.getenv("HOST", "0.0.0.0")
    PORT: int = int(os.getenv("PORT", "5000"))

    DEFAULT_ROOM: str = os.getenv("DEFAULT_ROOM", "general")
    MESSAGE_HISTORY_LIMIT: int = int(os.getenv("MESSAGE_HISTORY_LIMIT", "200"))
    PAGE_SIZE: int = int(os.getenv("PAGE_SIZE", "20"))
    PREVIEW_LENGTH: int = int(os.getenv("PREVIEW_LENGTH", "20"))

    # 10MB, large enough for inline file sharing
    MAX_MESSAGE_BYTES: int = int(os.getenv("MAX_MESSAGE_BYTES", "10000000"))

    def __init__(self, **overrides) -> None:
        for key, value in overrides.items():
            if not hasattr(self, key):
                raise AttributeError(f"Unknown setting: {key}")
            setattr(self, key, value)

    @property
    def cors_origins(self) -> List[str]:
        return [o.strip() for o in self.CLIENT_URL.split(",") if o.strip()]

settings = Settings()
