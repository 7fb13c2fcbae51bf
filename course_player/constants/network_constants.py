"""Network configuration constants for the course player."""

DEFAULT_HOST: str = "127.0.0.1"
DEFAULT_PORT: int = 8000
DEFAULT_BASE_URL: str = f"http://{DEFAULT_HOST}:{DEFAULT_PORT}"
DEFAULT_TIMEOUT_SECONDS: float = 10.0

LOGIN_PATH: str = "/api/auth/login"
REFRESH_PATH: str = "/api/auth/refresh"
MODULES_PATH_TEMPLATE: str = "/api/modules/course/{course_id}"
GRADES_PATH_TEMPLATE: str = "/api/test-grades/{course_id}"

AUTH_FAILURE_STATUS: int = 401
