"""
Point the application at a throwaway SQLite database before anything imports it.
"""
import os
import tempfile

_db_dir = tempfile.mkdtemp(prefix="garage-tests-")

os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{os.path.join(_db_dir, 'garage.db')}"
os.environ["SECRET_KEY"] = "test-secret-key-with-at-least-32-bytes!!"
os.environ["REMINDER_ENABLED"] = "false"
os.environ["MAIL_SUPPRESS_SEND"] = "true"
os.environ["DEBUG"] = "false"
os.environ["MAIL_BATCH_DELAY"] = "0"
