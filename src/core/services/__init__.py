"""Application services (lint orchestration)."""
