#!/usr/bin/env python3

import os
import sys

# Change to the project root directory
project_root = os.path.dirname(os.path.abspath(__file__))
os.chdir(project_root)
sys.path.insert(0, project_root)

import logging
import uvicorn

from adhealth.main import app

if __name__ == "__main__":
    logging.getLogger("uvicorn").info(f"Starting server from: {os.getcwd()}")
    uvicorn.run(app, host="127.0.0.1", port=int(os.getenv("PORT", "8000")), reload=False, access_log=True)
