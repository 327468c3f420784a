from __future__ import annotations

import uvicorn

from api_version_routing.common.config import get_settings


def main() -> int:
    s = get_settings()
    uvicorn.run("apps.api_gateway.main:app", host=s.api_host, port=s.api_port, log_config=None)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
