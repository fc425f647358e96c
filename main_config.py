import os

from dotenv import load_dotenv

load_dotenv()

BASE_DIR = os.path.dirname(os.path.abspath(__file__))
DB_DIR = os.path.join(BASE_DIR, "db")
CONVERSATIONS_DB_PATH = os.getenv(
    "CONVERSATION_DB_PATH", os.path.join(DB_DIR, "conversations.db")
)

PROMPTS_DIR = os.path.join(BASE_DIR, "prompts")
DEFAULT_SYSTEM_PROMPT_PATH = os.path.join(PROMPTS_DIR, "memory_agent_system_prompt.md")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
