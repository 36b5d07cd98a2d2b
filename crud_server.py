# Server entry point. Uses the in-memory backend unless a YAML config path is given.
import sys

from crud_lib.config import Config, load_config
from crud_lib.main import create_app

config = load_config(sys.argv[1]) if len(sys.argv) > 1 else Config(storage_backend='memory')
app = create_app(config)

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
