import gunicorn.http.wsgi
from functools import wraps
from dotenv import load_dotenv
from common.utils import safe_get_env_var, is_configured

load_dotenv()

# PORT is injected by the hosting platform; 6060 locally
myport = safe_get_env_var('PORT')
if not is_configured(myport):
    myport = "6060"

wsgi_app = "api.wsgi:app"
bind = f"0.0.0.0:{myport}"
accesslog = "-"


def wrap_default_headers(func):
    @wraps(func)
    def default_headers(*args, **kwargs):
        return [header for header in func(*args, **kwargs) if not header.startswith('Server: ')]
    return default_headers


gunicorn.http.wsgi.Response.default_headers = wrap_default_headers(gunicorn.http.wsgi.Response.default_headers)
