#!/usr/bin/env python3
"""
War Room server launcher script.

Starts uvicorn on the host / port from the feature flag config
(WARROOM_HOST, WARROOM_PORT).
"""

from warroom import PACKAGE_ROOT
from warroom.feature_flags import FeatureFlags


def main() -> None:
    import uvicorn

    config = FeatureFlags.get_config()
    uvicorn.run(
        "warroom.api:app",
        host=config.host,
        port=config.port,
        reload=True,
        reload_dirs=[str(PACKAGE_ROOT)],
    )


if __name__ == "__main__":
    main()
