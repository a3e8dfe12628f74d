"""
Flask extensions

Created unbound here so blueprints can decorate views at import time;
`create_app` binds them with `init_app`.
"""

from flask_limiter import Limiter
from flask_limiter.util import get_remote_address

# Storage and enablement come from RATELIMIT_* app config
limiter = Limiter(key_func=get_remote_address)
