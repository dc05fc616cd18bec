#!/usr/bin/env python
"""Script to run the Taskbook backend server."""
import os
from pathlib import Path

import uvicorn

# Run from the repository root so relative SQLite paths resolve here
os.chdir(Path(__file__).resolve().parent)

if __name__ == "__main__":
    uvicorn.run(
        "taskbook.main:app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8000")),
        reload=os.getenv("RELOAD", "true").lower() == "true",
    )
