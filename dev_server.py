#!/usr/bin/env python3
"""
Local development server for the interaction data collection endpoint.
Serves /wsapi/session_context and /wsapi/interaction_data for a dialog
running against localhost.
"""

import os
import sys
from pathlib import Path

# Load environment variables from .env file
from dotenv import load_dotenv
load_dotenv()

# Add src to Python path
current_dir = Path(__file__).parent
src_dir = current_dir / "src"
sys.path.insert(0, str(src_dir))

os.environ.setdefault('ENVIRONMENT', 'development')
# Every dialog session samples locally unless told otherwise
os.environ.setdefault('DATA_SAMPLE_RATE', '1.0')

if __name__ == "__main__":
    import uvicorn
    from interaction_data.config import configure_logging, get_settings

    configure_logging()
    settings = get_settings()

    print("Starting Interaction Data Collector")
    print(f"Session context: http://localhost:{settings.api_port}/wsapi/session_context")
    print(f"Metrics: http://localhost:{settings.api_port}/metrics")
    print("Press Ctrl+C to stop\n")

    uvicorn.run(
        "interaction_data.api.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=True,
        log_level=settings.log_level.lower()
    )
