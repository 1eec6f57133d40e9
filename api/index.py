"""
Vercel entry point for the Estate Listings API
"""
import os
import sys

# Add src directory to path
src_dir = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "src")
if src_dir not in sys.path:
    sys.path.insert(0, src_dir)

from mangum import Mangum

from estate.main import app, configure_runtime

# The lifespan is disabled below, so logging is configured here instead
configure_runtime(app)

# Lambda handler for ASGI app (disable lifespan for serverless)
handler = Mangum(app, lifespan="off")
