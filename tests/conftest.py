import os
import tempfile

# Keep test runs from writing app.log into the working tree
os.environ.setdefault("APP_LOG_FILE", os.path.join(tempfile.gettempdir(), "library_api_tests.log"))
os.environ.setdefault("APP_LOG_LEVEL", "WARNING")
