# config.py
import os
from pathlib import Path

# ======= Orientation generation =======
# 0 -> the 24 proper rotations of the cube; 1 -> also the 24 mirror images (48).
ALLOW_REFLECTIONS = int(os.getenv("PACK_ALLOW_REFLECTIONS", "0")) != 0

# ======= Worker caps =======
WORKERS = int(os.getenv("PACK_WORKERS", "1"))

# ======= Progress / logging =======
TRACK_PROGRESS       = int(os.getenv("PACK_TRACK_PROGRESS", "0")) != 0
PROGRESS_EVERY_NODES = int(os.getenv("PACK_PROGRESS_EVERY_NODES", "5000"))
LOG_DIR              = os.getenv("PACK_LOG_DIR", str(Path.cwd() / "logs"))
PROGRESS_STATE_FILE  = os.getenv("PACK_PROGRESS_STATE_FILE", "")

# ======= CP-SAT cross-check =======
CP_SAT_MAX_SECONDS = float(os.getenv("PACK_CP_SAT_MAX_SECONDS", "30"))
CP_SAT_WORKERS     = int(os.getenv("PACK_CP_SAT_WORKERS", "1"))
MAX_MEMORY_MB      = int(os.getenv("PACK_MAX_MEMORY_MB", "2048"))
RANDOM_SEED        = int(os.getenv("PACK_RANDOM_SEED", "0"))


class CFG:
    ALLOW_REFLECTIONS = ALLOW_REFLECTIONS

    WORKERS = WORKERS

    TRACK_PROGRESS       = TRACK_PROGRESS
    PROGRESS_EVERY_NODES = PROGRESS_EVERY_NODES
    LOG_DIR              = LOG_DIR
    PROGRESS_STATE_FILE  = PROGRESS_STATE_FILE

    CP_SAT_MAX_SECONDS = CP_SAT_MAX_SECONDS
    CP_SAT_WORKERS     = CP_SAT_WORKERS
    MAX_MEMORY_MB      = MAX_MEMORY_MB
    RANDOM_SEED        = RANDOM_SEED


__all__ = ["CFG"]
