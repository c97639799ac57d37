"""HTTP clients for openSenseMap (readings) and the OBS portal (uploads)."""

from .obs_portal import ObsPortalClient  # noqa: F401
from .opensensemap import OpenSenseMapClient  # noqa: F401
from .session import create_fetch_session, create_upload_session  # noqa: F401
