"""HTTP and WebSocket management API for Taurus.

Usage:
    import uvicorn
    from taurus.api import create_app

    uvicorn.run(create_app(), host="0.0.0.0", port=3000)
"""

from taurus.api.app import create_app
from taurus.api.broadcast import StatusBroadcaster

__all__ = ["StatusBroadcaster", "create_app"]
