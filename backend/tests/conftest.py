import os
import tempfile

# Settings are cached on first import of the app, so the test environment
# has to be in place before any test module is collected.
_tmp_dir = tempfile.mkdtemp(prefix="handover-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{os.path.join(_tmp_dir, 'test.db')}"
os.environ["UPLOAD_DIR"] = os.path.join(_tmp_dir, "uploads")
os.environ["JWT_SECRET_KEY"] = "test-secret"
os.environ["ENVIRONMENT"] = "test"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["ENABLE_INIT_DATA"] = "true"
