"""
Run the GreenHero CLI.

Usage:
    python run_cli.py [COMMAND] [OPTIONS]

Commands:
    signup            Create a new account
    login             Sign in and save credentials locally (~/.greenhero/credentials.json)
    logout            Clear stored credentials
    whoami            Show the currently logged-in user
    forgot-password   Request a password reset e-mail
    products          list / show / add marketplace listings
    chats             list / new / delete assistant chat sessions
    ask               One-shot question to the eco assistant
    chat              Interactive assistant session
    classify          Classify a photo of a waste item
    profile           show / update your profile

Examples:
    python run_cli.py login
    python run_cli.py products list --search compost
    python run_cli.py classify bottle.jpg

Environment variables (all optional, also read from .env):
    GREENHERO_API_URL              Backend origin (default: http://localhost:5000)
    GREENHERO_AI_URL               AI service base URL (default: http://localhost:8000/api)
    GREENHERO_AI_AGENT             Assistant/classifier agent name (default: adam)
    GREENHERO_REQUEST_TIMEOUT      Seconds before a request times out (default: 15)
    GREENHERO_SKIP_TUNNEL_WARNING  Send the ngrok bypass header (default: true)
    GREENHERO_HOME                 Credential directory (default: ~/.greenhero)
    GREENHERO_LOG_LEVEL            Logging level (default: WARNING)
"""

import sys
from pathlib import Path

# Ensure src/ is importable without installing the package
sys.path.insert(0, str(Path(__file__).parent / "src"))

from greenhero.adapters.cli.main import app

if __name__ == "__main__":
    app()
