import os
import tempfile

# Settings are read once at import time, so the environment has to be in
# place before any careerloop module is imported.
_DATA_DIR = tempfile.mkdtemp(prefix="careerloop-tests-")
os.environ["LOOP_DB_PATH"] = os.path.join(_DATA_DIR, "loops.db")
os.environ["RATE_LIMIT_ENABLED"] = "0"
os.environ["AI_PROVIDER"] = "gemini"
os.environ.pop("API_KEY", None)
os.environ.pop("GEMINI_API_KEY", None)
os.environ.pop("GOOGLE_API_KEY", None)
