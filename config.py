import os

# 기본 디렉토리 설정
BASE_DIR = os.path.dirname(os.path.abspath(__file__))

# 경로 설정
LOG_FILE = os.path.join(BASE_DIR, "launch.log")

# 서버 설정
DEFAULT_HOST = os.getenv("HOST", "127.0.0.1")
DEFAULT_PORT = int(os.getenv("PORT", "8080"))

# 세션 설정
SESSION_TTL = int(os.getenv("SESSION_TTL", "3600"))   # 1시간
SESSION_SWEEP_INTERVAL = 300                          # 만료 세션 정리 주기 (초)

# 백엔드 API 설정
API_BASE_URL = os.getenv("API_BASE_URL", "http://localhost:8000").rstrip("/")
REQUEST_TIMEOUT = float(os.getenv("REQUEST_TIMEOUT", "15.0"))

# 시험 진행 설정
FREE_QUESTIONS_LIMIT = int(os.getenv("FREE_QUESTIONS_LIMIT", "10"))   # 미수강자 무료 문제 수
QUESTIONS_PER_PAGE = 20         # 네비게이터 한 페이지당 문제 수
DEFAULT_DURATION_MINUTES = 30   # 시험 시간 정보가 없을 때 기본값
TIMER_WARNING_SECONDS = 600     # 10분 미만이면 경고 표시
TIMER_TICK_SECONDS = 1.0
