"""Skit Studio — dev launcher. Starts backend (and frontend, if present) in watch mode."""

import argparse
import os
import signal
import subprocess
import sys
from pathlib import Path

from dotenv import load_dotenv

ROOT = Path(__file__).parent
load_dotenv(ROOT / ".env")

HOST = os.getenv("HOST", "0.0.0.0")
BACKEND_PORT = os.getenv("BACKEND_PORT", "13013")
FRONTEND_PORT = os.getenv("FRONTEND_PORT", "13014")


def main():
    parser = argparse.ArgumentParser(description="Skit Studio dev launcher")
    parser.add_argument("--data-dir", type=Path, default=None,
                        help="Settings storage directory (default: ./data)")
    parser.add_argument("--log-level", default=os.getenv("LOG_LEVEL", "info"),
                        choices=["critical", "error", "warning", "info", "debug"],
                        help="Backend log level")
    args = parser.parse_args()

    # Build env for subprocesses so backend picks up the same data dir
    env = os.environ.copy()
    if args.data_dir:
        env["DATA_DIR"] = str(args.data_dir.resolve())

    procs: list[subprocess.Popen] = []

    def shutdown(*_):
        print("\nShutting down...")
        for p in procs:
            p.terminate()
        for p in procs:
            p.wait()
        sys.exit(0)

    signal.signal(signal.SIGINT, shutdown)
    signal.signal(signal.SIGTERM, shutdown)

    print(f"Starting backend on http://localhost:{BACKEND_PORT} ...")
    procs.append(subprocess.Popen(
        ["uvicorn", "backend.app:app", "--reload", "--host", HOST, "--port", BACKEND_PORT,
         "--log-level", args.log_level],
        cwd=ROOT, env=env,
    ))

    if (ROOT / "frontend").is_dir():
        print(f"Starting frontend on http://localhost:{FRONTEND_PORT} ...")
        procs.append(subprocess.Popen(
            ["bun", "run", "dev", "--port", FRONTEND_PORT],
            cwd=ROOT / "frontend", env=env,
        ))

    for p in procs:
        p.wait()


if __name__ == "__main__":
    main()
