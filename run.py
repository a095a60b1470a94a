"""Development runner.
Usage: python run.py  (reads .env if present)
Set APP_PASSWORD and SECRET_KEY; DATA_FILE / SHARING_FILE override the JSON file locations.
"""

from __future__ import annotations

from dotenv import load_dotenv

from tripplan import create_app

load_dotenv()

app = create_app()

if __name__ == "__main__":  # pragma: no cover
    import os
    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", "5000"))
    app.run(debug=True, host=host, port=port)
