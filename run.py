#!/usr/bin/env python3
"""Run script for the roadmap scheduler API."""

import uvicorn

from roadmap.database.database import init_db

if __name__ == "__main__":
    init_db()
    uvicorn.run(
        "roadmap.api.app:app",
        host="0.0.0.0",
        port=8000,
        reload=True
    )
