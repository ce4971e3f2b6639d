"""
Service procedures run by the host operations CLI.
"""

from ops_setup.services.cloudflared import redeploy_cloudflared
from ops_setup.services.database_container import start_database_container

__all__ = ["redeploy_cloudflared", "start_database_container"]
