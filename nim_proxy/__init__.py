"""NIM Proxy

A proxy server that exposes an OpenAI-compatible chat completions API on top
of NVIDIA NIM.
"""

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

try:
    from importlib.metadata import PackageNotFoundError, version

    __version__ = version("nim-proxy")
except PackageNotFoundError:
    # Fallback for source checkouts that were never installed
    __version__ = "1.0.0"
__author__ = "NIM Proxy"
